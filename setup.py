#!/usr/bin/env python

# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Setuptools installer for txftp.
"""

import pathlib

import setuptools

setuptools.setup(
    name="txftp",
    version="1.0.0",
    description="An FTP client for Twisted, with passive mode transfers.",
    long_description=pathlib.Path("README.rst").read_text(encoding="utf8"),
    long_description_content_type="text/x-rst",
    license="MIT",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=setuptools.find_packages("src"),
    install_requires=[
        "Twisted >= 24.3.0",
        "attrs >= 21.3.0",
        "constantly >= 15.1",
        "zope.interface >= 5",
    ],
    entry_points={
        "console_scripts": [
            "txftp = txftp.scripts.ftpclient:run",
        ],
    },
    classifiers=[
        "Framework :: Twisted",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Internet :: File Transfer Protocol (FTP)",
    ],
)
