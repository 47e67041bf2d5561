# -*- test-case-name: txftp.test.test_listing -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Parsing of directory listings as returned by C{LIST} and C{STAT}.

Two families of listings are understood.  Unix C{ls -l} style::

    -rw-r--r--   1 root     other        531 Jan 29 03:26 README
    lrwxrwxrwx   1 root     other          7 Jan 29  2003 bin -> usr/bin

and MS-DOS style, as sent by IIS::

    04-27-00  09:09PM       <DIR>          licensed
    04-14-00  03:47PM                  589 readme.htm

If you need different evil for a wacky FTP server, you can add a pattern.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import List, Optional

import attr
from constantly import NamedConstant, Names


class FileType(Names):
    FILE = NamedConstant()
    DIRECTORY = NamedConstant()
    SYMLINK = NamedConstant()
    UNKNOWN = NamedConstant()


_UNIX_TYPES = {
    "-": FileType.FILE,
    "d": FileType.DIRECTORY,
    "l": FileType.SYMLINK,
}

_MONTHS = ["jan", "feb", "mar", "apr", "may", "jun",
           "jul", "aug", "sep", "oct", "nov", "dec"]

_UNIX_LINE = re.compile(
    r"^(?P<filetype>[-dlbcps])(?P<perms>[-rwxsStTl]{9})[+@.]?\s+"
    r"(?:\d+\s+)?"
    r"(?P<owner>\S+)\s+(?P<group>\S+)\s+(?P<size>\d+)\s+"
    r"(?P<month>[A-Za-z]{3})\s+(?P<day>\d{1,2})\s+"
    r"(?:(?P<hour>\d{1,2}):(?P<minute>\d{2})|(?P<year>\d{4}))\s"
    r"(?P<name>.+)$"
)

_DOS_LINE = re.compile(
    r"^(?P<month>\d{2})-(?P<day>\d{2})-(?P<year>\d{2,4})\s+"
    r"(?P<hour>\d{2}):(?P<minute>\d{2})\s*(?P<ampm>[AaPp][Mm])\s+"
    r"(?:(?P<dir><DIR>)|(?P<size>\d+))\s+"
    r"(?P<name>.+)$"
)


@attr.s(frozen=True)
class Permissions:
    read: bool = attr.ib(default=False)
    write: bool = attr.ib(default=False)
    execute: bool = attr.ib(default=False)

    @classmethod
    def fromTriple(cls, triple: str) -> "Permissions":
        """
        Build from one C{rwx} triple of a Unix mode string.
        """
        return cls(
            read=triple[0] == "r",
            write=triple[1] == "w",
            execute=triple[2] in "xst",
        )


@attr.s(frozen=True)
class FileEntry:
    """
    One entry of a directory listing.

    @ivar target: where a symbolic link points, L{None} otherwise.
    @ivar time: modification time, without timezone; L{None} if the listing
        format carries none.
    """

    name: str = attr.ib()
    type: NamedConstant = attr.ib(default=FileType.UNKNOWN)
    time: Optional[datetime] = attr.ib(default=None)
    size: int = attr.ib(default=0)
    owner: Optional[str] = attr.ib(default=None)
    group: Optional[str] = attr.ib(default=None)
    target: Optional[str] = attr.ib(default=None)
    userPermissions: Optional[Permissions] = attr.ib(default=None)
    groupPermissions: Optional[Permissions] = attr.ib(default=None)
    otherPermissions: Optional[Permissions] = attr.ib(default=None)


def _unixTime(match, now: datetime) -> Optional[datetime]:
    try:
        month = _MONTHS.index(match.group("month").lower()) + 1
    except ValueError:
        return None
    day = int(match.group("day"))
    try:
        if match.group("year"):
            return datetime(int(match.group("year")), month, day)
        hour, minute = int(match.group("hour")), int(match.group("minute"))
        stamp = datetime(now.year, month, day, hour, minute)
        # Recent files are listed without a year; one that would be in the
        # future belongs to last year.
        if stamp > now + timedelta(days=1):
            stamp = stamp.replace(year=now.year - 1)
        return stamp
    except ValueError:
        return None


def _parseUnix(match, now: datetime) -> FileEntry:
    name, target = match.group("name"), None
    filetype = _UNIX_TYPES.get(match.group("filetype"), FileType.UNKNOWN)
    if filetype is FileType.SYMLINK and " -> " in name:
        name, target = name.split(" -> ", 1)
    perms = match.group("perms")
    return FileEntry(
        name=name,
        type=filetype,
        time=_unixTime(match, now),
        size=int(match.group("size")),
        owner=match.group("owner"),
        group=match.group("group"),
        target=target,
        userPermissions=Permissions.fromTriple(perms[0:3]),
        groupPermissions=Permissions.fromTriple(perms[3:6]),
        otherPermissions=Permissions.fromTriple(perms[6:9]),
    )


def _parseDOS(match) -> FileEntry:
    year = int(match.group("year"))
    if year < 100:
        year += 2000 if year < 70 else 1900
    hour = int(match.group("hour")) % 12
    if match.group("ampm").lower() == "pm":
        hour += 12
    try:
        stamp = datetime(year, int(match.group("month")),
                         int(match.group("day")), hour,
                         int(match.group("minute")))
    except ValueError:
        stamp = None
    if match.group("dir"):
        return FileEntry(name=match.group("name"), type=FileType.DIRECTORY,
                         time=stamp)
    return FileEntry(name=match.group("name"), type=FileType.FILE,
                     time=stamp, size=int(match.group("size")))


def parseEntry(line: str, now: Optional[datetime] = None) -> Optional[FileEntry]:
    """
    Parse a single listing line.

    @return: a L{FileEntry}, or L{None} for lines that describe no entry
        (C{total} lines, reply framing, blank lines).
    """
    if now is None:
        now = datetime.now()
    line = line.strip()
    match = _UNIX_LINE.match(line)
    if match is not None:
        return _parseUnix(match, now)
    match = _DOS_LINE.match(line)
    if match is not None:
        return _parseDOS(match)
    return None


def parseEntries(text: str, now: Optional[datetime] = None) -> List[FileEntry]:
    """
    Parse a whole listing, skipping every line that is not an entry.

    Entries named C{.} or C{..} are dropped.
    """
    entries = []
    for line in text.splitlines():
        entry = parseEntry(line, now)
        if entry is not None and entry.name not in (".", ".."):
            entries.append(entry)
    return entries
