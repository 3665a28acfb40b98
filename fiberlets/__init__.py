import logging
import sys

from fiberlets.reactor import *
from fiberlets.scheduler import *
from fiberlets.eventlet import *
from fiberlets.api import *
from fiberlets.utils import *


VERSION = (0, 1, 0, '')

__version__ = ".".join(filter(None, (str(x) for x in VERSION)))


def configure_logging(filename=None, filemode=None, fmt=None,
        level=logging.INFO, stream=None, handler=None):
    if handler is None:
        if filename is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        else:
            handler = logging.FileHandler(filename, filemode or 'a')

    if fmt is None:
        fmt = "[%(asctime)s] %(name)s/%(levelname)s | %(message)s"
    handler.setFormatter(logging.Formatter(fmt))

    log = logging.getLogger("fiberlets")
    log.setLevel(level)
    log.addHandler(handler)
