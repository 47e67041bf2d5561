# -*- test-case-name: txftp.test.test_command -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
The FTP verbs this client knows how to send, and helpers to turn them into
command lines.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

import attr
from constantly import NamedConstant, Names, ValueConstant, Values


class Verb(Names):
    """
    Raw FTP verbs.  The wire form of a verb is its upper-cased name, except
    for L{CHMOD} which travels as a C{SITE} sub-command.
    """

    # Commands without parameters
    ABOR = NamedConstant()
    PWD = NamedConstant()
    CDUP = NamedConstant()
    FEAT = NamedConstant()
    NOOP = NamedConstant()
    QUIT = NamedConstant()
    PASV = NamedConstant()
    SYST = NamedConstant()

    # Commands with one or more parameters
    ACCT = NamedConstant()
    CWD = NamedConstant()
    DELE = NamedConstant()
    LIST = NamedConstant()
    MDTM = NamedConstant()
    MKD = NamedConstant()
    MODE = NamedConstant()
    NLST = NamedConstant()
    OPTS = NamedConstant()
    PASS = NamedConstant()
    RETR = NamedConstant()
    RMD = NamedConstant()
    RNFR = NamedConstant()
    RNTO = NamedConstant()
    SITE = NamedConstant()
    STAT = NamedConstant()
    STOR = NamedConstant()
    TYPE = NamedConstant()
    USER = NamedConstant()
    XRMD = NamedConstant()

    # Extended features
    CHMOD = NamedConstant()
    SIZE = NamedConstant()


# Verbs that may be sent before the login exchange has completed.
BOOTSTRAP_VERBS = frozenset(
    [Verb.FEAT, Verb.SYST, Verb.USER, Verb.PASS, Verb.ACCT]
)


class TransferType(Values):
    """
    Representation types for the C{TYPE} command.
    """

    ASCII = ValueConstant("A")
    BINARY = ValueConstant("I")


def verbText(verb: NamedConstant) -> str:
    if verb is Verb.CHMOD:
        return "SITE CHMOD"
    return verb.name.upper()


def formatCommand(verb: NamedConstant, *args: object) -> str:
    """
    Build the command line for C{verb}, without the line terminator.

    Arguments are joined with single spaces; L{None} arguments are dropped
    and newlines are escaped as NULs (RFC 2640, section 3.1).
    """
    parts = [verbText(verb)]
    parts.extend(str(arg) for arg in args if arg is not None)
    return escapePath(" ".join(parts).strip())


def escapePath(path: str) -> str:
    """
    Returns a FTP escaped path (replace newlines with nulls).
    """
    return path.replace("\n", "\0")


def verbOf(text: Optional[str]) -> Optional[NamedConstant]:
    """
    Find the L{Verb} a command line starts with, if it is one we know.
    """
    if not text:
        return None
    name = text.split(None, 1)[0].upper()
    try:
        return Verb.lookupByName(name)
    except ValueError:
        return None


@attr.s(frozen=True)
class MarkExpectation:
    """
    The preliminary replies a command is waiting for.

    @ivar marks: reply codes that complete the command even though they are
        marks (C{1yz}) or a transfer-complete C{226}.
    @ivar ignoreCode: when one of C{marks} arrives, swallow exactly one later
        reply carrying this code.
    """

    marks: FrozenSet[int] = attr.ib(converter=frozenset)
    ignoreCode: Optional[int] = attr.ib(default=None)

    @classmethod
    def of(
        cls, marks: Iterable[int], ignoreCode: Optional[int] = None
    ) -> "MarkExpectation":
        return cls(frozenset(marks), ignoreCode)


# Replies for commands opening a data connection: the mark means the data
# connection is open, the trailing 226 is swallowed.
DATA_TRANSFER = MarkExpectation.of([125, 150], ignoreCode=226)

# STOR only waits for the mark; its 226 completes a separate placeholder.
UPLOAD = MarkExpectation.of([125, 150])

TRANSFER_COMPLETE = MarkExpectation.of([226])
