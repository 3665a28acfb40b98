#!/usr/bin/env python
# vim: fileencoding=utf8:et:sw=4:ts=8:sts=4

from setuptools import setup


VERSION = (0, 1, 0, "")

setup(
    name="fiberlets",
    description="Cooperative coroutines with channels and events on greenlets",
    packages=["fiberlets"],
    version=".".join(filter(None, map(str, VERSION))),
    license="BSD",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Natural Language :: English",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
    ],
    python_requires=">=3.7",
    install_requires=['greenlet'],
    extras_require={'test': ['pytest']},
)
