# -*- test-case-name: txftp.test.test_queue -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Serialization of commands on the control connection and correlation of the
server's replies with them.
"""

from __future__ import annotations

from typing import Callable, List, Optional

import attr

from twisted.internet.defer import Deferred
from twisted.logger import Logger
from twisted.python.failure import Failure

from txftp.command import MarkExpectation
from txftp.error import CommandFailed
from txftp.reply import Response

_log = Logger()

# Unsolicited service-ready banner.
BANNER = 220
TRANSFER_COMPLETE = 226


@attr.s
class Command:
    """
    A command waiting for its final reply.

    @ivar text: the command line, or L{None} for a placeholder that is never
        sent and only collects a reply.
    @ivar deferred: fired with the final L{Response}, or failed with
        L{CommandFailed}.
    @ivar expectation: the marks this command accepts as its final reply.
    """

    text: Optional[str] = attr.ib()
    deferred: Deferred = attr.ib(factory=Deferred)
    expectation: Optional[MarkExpectation] = attr.ib(default=None)

    def expectsMark(self, code: int) -> bool:
        return self.expectation is not None and code in self.expectation.marks


class CommandQueue:
    """
    First-in first-out queue of commands with at most one of them in flight.

    @ivar _transmit: called with the text of each command as it becomes the
        in-flight command.
    """

    def __init__(self, transmit: Callable[[str], None]) -> None:
        self._transmit = transmit
        self._commands: List[Command] = []
        self._inFlight = False

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def head(self) -> Optional[Command]:
        if self._commands:
            return self._commands[0]
        return None

    @property
    def inFlight(self) -> bool:
        return self._inFlight

    def enqueue(self, command: Command) -> Deferred:
        """
        Append C{command}, sending it right away if nothing is in flight.

        @return: C{command.deferred}
        """
        self._commands.append(command)
        self._sendNext()
        return command.deferred

    def pushFront(self, command: Command) -> None:
        """
        Put C{command} ahead of everything still waiting.  Only meaningful
        while a completed command's result is being delivered, before
        L{advance} runs.
        """
        self._commands.insert(0, command)

    def pop(self) -> Command:
        return self._commands.pop(0)

    def advance(self) -> None:
        """
        The in-flight command got its final reply: send the next one.
        """
        self._inFlight = False
        self._sendNext()

    def _sendNext(self) -> None:
        if self._inFlight or not self._commands:
            return
        self._inFlight = True
        text = self._commands[0].text
        if text is not None:
            self._transmit(text)

    def failAll(self, failure: Failure) -> None:
        """
        Fail every pending command with C{failure}.
        """
        commands, self._commands = self._commands, []
        self._inFlight = False
        for command in commands:
            command.deferred.errback(failure)


class ReplyCorrelator:
    """
    Match decoded replies with the in-flight command of a L{CommandQueue}.

    @ivar ignoreCode: a reply code to swallow once, armed when a command
        completes on a mark that announces a later duplicate (typically the
        C{226} following a C{150}).
    """

    ignoreCode: Optional[int] = None

    def __init__(self, queue: CommandQueue) -> None:
        self._queue = queue

    def replyReceived(self, response: Response) -> None:
        code = response.code
        if code == BANNER:
            return

        # The duplicate of an already consumed mark is swallowed exactly
        # once, whatever is queued by the time it arrives.
        if self.ignoreCode is not None and self.ignoreCode == code:
            self.ignoreCode = None
            return

        command = self._queue.head
        if command is None:
            _log.debug("Discarding reply with no pending command: {text}",
                       text=response.text)
            return

        armed = None
        if response.isMark() or code == TRANSFER_COMPLETE:
            if not command.expectsMark(code):
                return
            armed = command.expectation.ignoreCode

        self.ignoreCode = armed
        self._queue.pop()
        if response.isError():
            command.deferred.errback(CommandFailed(code, response.text))
        else:
            command.deferred.callback(response)
        self._queue.advance()
