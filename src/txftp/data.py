# -*- test-case-name: txftp.test.test_data -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Passive mode data connections.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

from twisted.internet import error, protocol
from twisted.internet.defer import Deferred, fail, succeed
from twisted.internet.endpoints import TCP4ClientEndpoint, connectProtocol
from twisted.python.failure import Failure

from txftp.error import ConnectionFailed, ConnectionLost, PassiveModeError

_HOST_PORT = re.compile(r",\s*".join([r"(-?\d+)\s*"] * 6))


def decodeHostPort(text: str) -> Tuple[str, int]:
    """
    Decode an FTP response specifying a host and port.

    Servers disagree on how they frame the six numbers (parentheses, none,
    trailing dots), so only the first run of six comma separated numbers is
    considered.

    @return: a 2-tuple of (host, port).
    @raise PassiveModeError: if C{text} holds no such run.
    """
    match = _HOST_PORT.search(text)
    if match is None:
        raise PassiveModeError("PASV: Bad host/port combination", text)
    numbers = [int(n) for n in match.groups()]
    host = ".".join(str(n) for n in numbers[:4])
    port = (numbers[4] & 255) * 256 + (numbers[5] & 255)
    return host, port


def encodeHostPort(host: str, port: int) -> str:
    numbers = host.split(".") + [str(port >> 8), str(port % 256)]
    return ",".join(numbers)


class PassiveDataChannel(protocol.Protocol):
    """
    One end of a single-use data connection.

    Received bytes go to the sink installed with L{setSink}; bytes arriving
    before that are held back and delivered when the sink is installed.

    @ivar bytesReceived: total number of bytes received so far.
    @ivar closed: C{True} once the connection is gone.
    """

    bytesReceived = 0
    closed = False

    def __init__(self) -> None:
        self._sink: Optional[Callable[[bytes], object]] = None
        self._pending: List[bytes] = []
        self._waiters: List[Deferred] = []
        self._result: Optional[object] = None
        self._sinkFailure: Optional[Failure] = None

    def setSink(self, sink: Callable[[bytes], object]) -> None:
        self._sink = sink
        pending, self._pending = self._pending, []
        for data in pending:
            self._deliver(data)

    def dataReceived(self, data: bytes) -> None:
        self.bytesReceived += len(data)
        if self._sink is None:
            self._pending.append(data)
        else:
            self._deliver(data)

    def _deliver(self, data: bytes) -> None:
        if self._sinkFailure is not None:
            return
        try:
            self._sink(data)
        except Exception:
            self._sinkFailure = Failure()
            self.transport.loseConnection()

    def write(self, data: bytes) -> None:
        self.transport.write(data)

    def pauseProducing(self) -> None:
        if not self.closed:
            self.transport.pauseProducing()

    def resumeProducing(self) -> None:
        if not self.closed:
            self.transport.resumeProducing()

    def stopProducing(self) -> None:
        self.close()

    def close(self) -> None:
        """
        Close the connection once everything written has been flushed.
        """
        if not self.closed and self.transport is not None:
            self.transport.loseConnection()

    def whenClosed(self) -> Deferred:
        """
        @return: a L{Deferred} firing with the number of bytes received when
            the connection closes cleanly, or failing with the error that
            broke it.
        """
        if self.closed:
            if isinstance(self._result, Failure):
                return fail(self._result)
            return succeed(self._result)
        d = Deferred()
        self._waiters.append(d)
        return d

    def connectionLost(self, reason: Failure = protocol.connectionDone) -> None:
        self.closed = True
        if self._sinkFailure is not None:
            self._result = self._sinkFailure
        elif reason.check(error.ConnectionDone):
            self._result = self.bytesReceived
        else:
            self._result = Failure(ConnectionLost("Data connection lost",
                                                  reason.value))
        waiters, self._waiters = self._waiters, []
        for d in waiters:
            if isinstance(self._result, Failure):
                d.errback(self._result)
            else:
                d.callback(self._result)


def connectPassive(reactor, host: str, port: int,
                   timeout: float = 30) -> Deferred:
    """
    Open a data connection to the address a PASV reply announced.

    @return: a L{Deferred} firing with a connected L{PassiveDataChannel}, or
        failing with L{ConnectionFailed}.
    """
    endpoint = TCP4ClientEndpoint(reactor, host, port, timeout=timeout)
    d = connectProtocol(endpoint, PassiveDataChannel())

    def connectFailed(reason):
        return Failure(ConnectionFailed(
            f"Data connection to {host}:{port} failed", reason.value))

    return d.addErrback(connectFailed)
