# -*- test-case-name: txftp.test.test_client -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
The control connection protocol.
"""

from __future__ import annotations

from twisted.internet.protocol import connectionDone
from twisted.logger import Logger
from twisted.protocols import basic
from twisted.python.failure import Failure

from txftp.reply import ReplyDecoder


class FTPControlProtocol(basic.LineReceiver):
    """
    Line-buffered control connection owned by an
    L{FTPClient<txftp.client.FTPClient>}.

    Every received line is reported to the client with C{dataLineReceived},
    complete replies with C{replyReceived}; sending goes through
    L{sendCommand}.  Servers terminating lines with a bare LF are tolerated.

    @ivar client: the owning client, or L{None} once detached.
    """

    delimiter = b"\n"
    MAX_LENGTH = 65536

    _log = Logger()

    def __init__(self, client, encoding: str = "utf-8") -> None:
        self.client = client
        self.encoding = encoding
        self.decoder = ReplyDecoder()

    def lineReceived(self, line: bytes) -> None:
        if self.client is None:
            return
        text = line.rstrip(b"\r").decode(self.encoding, "replace")
        self.client.dataLineReceived(text)
        response = self.decoder.decode(text)
        if response is not None:
            self.client.replyReceived(response)

    def lineLengthExceeded(self, line: bytes) -> None:
        self._log.warn(
            "Reply line too long ({length} bytes), dropping the connection",
            length=len(line),
        )
        return basic.LineReceiver.lineLengthExceeded(self, line)

    def sendCommand(self, text: str) -> None:
        self.transport.write(text.encode(self.encoding) + b"\r\n")

    def connectionLost(self, reason: Failure = connectionDone) -> None:
        client, self.client = self.client, None
        if client is not None:
            client.controlConnectionLost(self, reason)
