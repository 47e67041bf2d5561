# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
txftp: an FTP client for Twisted.

The entry point is L{txftp.client.FTPClient}; many clients can be managed
through L{txftp.sessions.FTPSessionManager}.
"""

__version__ = "1.0.0"

from txftp.client import FTPClient
from txftp.command import TransferType, Verb
from txftp.error import (
    CommandFailed,
    ConnectionFailed,
    ConnectionLost,
    FTPError,
    LocalIOError,
    LoginFailed,
    PassiveModeError,
    UnexpectedReply,
)
from txftp.listing import FileEntry, FileType, parseEntries
from txftp.reply import Response
from txftp.sessions import FTPSessionManager

__all__ = [
    "__version__",
    "FTPClient",
    "FTPSessionManager",
    "TransferType",
    "Verb",
    "Response",
    "FileEntry",
    "FileType",
    "parseEntries",
    "FTPError",
    "CommandFailed",
    "ConnectionFailed",
    "ConnectionLost",
    "LocalIOError",
    "LoginFailed",
    "PassiveModeError",
    "UnexpectedReply",
]
