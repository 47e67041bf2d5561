# -*- test-case-name: txftp.test.test_reply -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Decoding of FTP control channel replies.

A reply is one or more lines.  The last (or only) line starts with three
digits followed by a space; a multi-line reply is opened by the same three
digits followed by a hyphen (RFC 959, section 4.2)::

    211-Features:
     MDTM
     SIZE
    211 End
"""

from __future__ import annotations

import re
from typing import List, Optional

import attr

_REPLY_LINE = re.compile(r"^(?P<code>\d{3})(?P<sep>[ -]|$)")
_QUOTED_PATH = re.compile(r'"(.*)"')


@attr.s(frozen=True)
class Response:
    """
    A complete reply from the server.

    @ivar code: the numeric reply code.
    @ivar text: every line of the reply joined with C{"\\n"}, reply codes
        included.
    """

    code: int = attr.ib()
    text: str = attr.ib()

    def isMark(self) -> bool:
        """
        Is this a preliminary reply (C{1yz})?
        """
        return 100 < self.code < 200

    def isError(self) -> bool:
        return self.code > 399


class ReplyDecoder:
    """
    Accumulate control channel lines into L{Response}s.

    @ivar _code: the code of the multi-line reply being accumulated, or
        L{None} between replies.
    @ivar _lines: lines of the multi-line reply being accumulated.
    """

    def __init__(self) -> None:
        self._code: Optional[str] = None
        self._lines: List[str] = []

    def decode(self, line: str) -> Optional[Response]:
        """
        Feed one line (without its line terminator).

        @return: the L{Response} completed by C{line}, or L{None} if C{line}
            is empty, is not part of a reply, or does not end the reply
            currently being accumulated.
        """
        if self._code is not None:
            self._lines.append(line)
            if line.startswith(self._code + " ") or line == self._code:
                return self._finish()
            return None

        if not line.strip():
            return None
        match = _REPLY_LINE.match(line)
        if match is None:
            return None
        if match.group("sep") == "-":
            self._code = match.group("code")
            self._lines = [line]
            return None
        return Response(int(match.group("code")), line)

    def _finish(self) -> Response:
        code, lines = self._code, self._lines
        self._code = None
        self._lines = []
        return Response(int(code), "\n".join(lines))


def parsePWDResponse(text: str) -> Optional[str]:
    """
    Extract the quoted directory from the text of a 257 reply, such as
    C{'"/pub/incoming" is the current directory'}.

    @return: the directory, or L{None} if the text quotes nothing.
    """
    match = _QUOTED_PATH.search(text)
    if match:
        return match.group(1)
    return None
