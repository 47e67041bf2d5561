# -*- test-case-name: txftp.test.test_client -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Exceptions raised or delivered (as L{Failure<twisted.python.failure.Failure>}
instances) by the FTP client.
"""


class FTPError(Exception):
    """
    Base class for every error the FTP client delivers.
    """


class ConnectionFailed(FTPError):
    """
    The control connection could not be established.
    """


class ConnectionLost(FTPError):
    """
    The control connection went away while commands were still pending.
    """


class CommandFailed(FTPError):
    """
    The server answered a command with a reply code above 399.

    @ivar code: the numeric reply code.
    @ivar text: the full text of the reply.
    """

    def __init__(self, code, text):
        FTPError.__init__(self, code, text)
        self.code = code
        self.text = text

    def __str__(self) -> str:
        return self.text or "Unknown FTP error."


class LoginFailed(FTPError):
    """
    The server did not accept the USER/PASS exchange.
    """


class PassiveModeError(FTPError):
    """
    The reply to PASV could not be turned into a host and a port.
    """


class LocalIOError(FTPError):
    """
    A local file involved in a transfer could not be opened, read or written.
    """


class UnexpectedReply(FTPError):
    """
    A preliminary mark was expected but the server sent something else.
    """

    def __init__(self, response):
        FTPError.__init__(self, response)
        self.response = response

    def __str__(self) -> str:
        return f"Unexpected reply {self.response.text!r}"


class TooManySessions(FTPError):
    """
    The session manager already holds its maximum number of sessions.
    """


class UnknownSession(FTPError):
    """
    No session is registered under the given identifier.
    """


__all__ = [
    "FTPError",
    "ConnectionFailed",
    "ConnectionLost",
    "CommandFailed",
    "LoginFailed",
    "PassiveModeError",
    "LocalIOError",
    "UnexpectedReply",
    "TooManySessions",
    "UnknownSession",
]
