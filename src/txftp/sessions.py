# -*- test-case-name: txftp.test.test_sessions -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Bookkeeping for many FTP clients at once.

L{FTPSessionManager} owns a map of session identifiers to logged in
L{FTPClient}s, for services exposing FTP access to several callers.  It is
also where response deadlines live: the clients themselves wait for replies
indefinitely.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from twisted.internet.defer import Deferred, fail, maybeDeferred
from twisted.logger import Logger
from twisted.python.failure import Failure

from txftp.client import FTPClient, _maybeGlobalReactor
from txftp.error import TooManySessions, UnknownSession


class _SessionClient(FTPClient):
    """
    A client that tells its manager when its control connection breaks.
    """

    onTransportError: Optional[Callable[[Failure], None]] = None

    def transportError(self, reason: Failure) -> None:
        FTPClient.transportError(self, reason)
        if self.onTransportError is not None:
            self.onTransportError(reason)


class FTPSessionManager:
    """
    @ivar defaults: keyword arguments for every L{FTPClient} created, such as
        C{host}, C{port}, C{user} and C{password}.
    @ivar maxSessions: how many sessions may be open at once, L{None} for no
        limit.
    @ivar commandTimeout: seconds to wait for each operation run through
        L{run} or L{runOnce}, L{None} to wait forever.
    """

    clientFactory = _SessionClient

    _log = Logger()

    def __init__(
        self,
        defaults: Optional[Dict[str, Any]] = None,
        maxSessions: Optional[int] = None,
        commandTimeout: Optional[float] = None,
        reactor=None,
    ) -> None:
        self.defaults = dict(defaults or {})
        self.maxSessions = maxSessions
        self.commandTimeout = commandTimeout
        self._reactor = _maybeGlobalReactor(reactor)
        self._sessions: Dict[int, FTPClient] = {}
        self._nextSessionId = 1

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, sessionId: int) -> bool:
        return sessionId in self._sessions

    def _newClient(self, overrides: Dict[str, Any]) -> FTPClient:
        config = dict(self.defaults)
        config.update(overrides)
        config.setdefault("reactor", self._reactor)
        return self.clientFactory(**config)

    def _withTimeout(self, d: Deferred) -> Deferred:
        """
        Give up waiting on C{d} after L{commandTimeout} seconds, without
        cancelling it: the command stays queued on its connection.
        """
        if self.commandTimeout is None:
            return d
        guarded: Deferred = Deferred(lambda ignored: None)

        def relay(result):
            if not guarded.called:
                if isinstance(result, Failure):
                    guarded.errback(result)
                else:
                    guarded.callback(result)
            elif isinstance(result, Failure):
                self._log.warn("Operation failed after timing out: {reason}",
                               reason=result.getErrorMessage())

        d.addBoth(relay)
        return guarded.addTimeout(self.commandTimeout, self._reactor)

    def connect(self, **overrides: Any) -> Deferred:
        """
        Open a session: connect, query features and log in.

        @param overrides: client keyword arguments replacing L{defaults} for
            this session.

        @return: a L{Deferred} firing with the new session identifier.
        """
        if self.maxSessions is not None and len(self) >= self.maxSessions:
            return fail(TooManySessions("Maximum number of sessions reached",
                                        self.maxSessions))
        client = self._newClient(overrides)
        sessionId = self._nextSessionId
        self._nextSessionId += 1
        self._sessions[sessionId] = client
        client.onTransportError = lambda reason: self._drop(sessionId)

        def loggedIn(ignored):
            self._log.info("Session {sessionId} open to {host}:{port}",
                           sessionId=sessionId, host=client.host,
                           port=client.port)
            return sessionId

        def failed(failure):
            self._drop(sessionId)
            client.destroy()
            return failure

        d = client.ensureFeatures()
        d.addCallback(lambda ignored: client.authenticate())
        d = self._withTimeout(d)
        d.addCallbacks(loggedIn, failed)
        return d

    def get(self, sessionId: int) -> FTPClient:
        """
        @raise UnknownSession: if no session has this identifier.
        """
        try:
            return self._sessions[sessionId]
        except KeyError:
            raise UnknownSession(f"Invalid session id: {sessionId}")

    def _drop(self, sessionId: int) -> Optional[FTPClient]:
        client = self._sessions.pop(sessionId, None)
        if client is not None:
            self._log.info("Session {sessionId} closed", sessionId=sessionId)
        return client

    def run(self, sessionId: int,
            operation: Callable[[FTPClient], Any]) -> Deferred:
        """
        Call C{operation} with the client of session C{sessionId}.

        @return: a L{Deferred} firing with the result of C{operation}.
        """
        try:
            client = self.get(sessionId)
        except UnknownSession:
            return fail()
        return self._withTimeout(maybeDeferred(operation, client))

    def runOnce(self, operation: Callable[[FTPClient], Any],
                **overrides: Any) -> Deferred:
        """
        Call C{operation} with a throwaway client, which is sent QUIT and
        destroyed afterwards whatever the outcome.
        """
        client = self._newClient(overrides)

        def finished(result):
            if not client.authenticated:
                client.destroy()
                return result
            d = self._withTimeout(client.quit())
            d.addBoth(lambda ignored: client.destroy())
            d.addCallback(lambda ignored: result)
            return d

        d = self._withTimeout(maybeDeferred(operation, client))
        d.addBoth(finished)
        return d

    def disconnect(self, sessionId: int) -> None:
        """
        Send QUIT on session C{sessionId} and close it, without waiting for
        the reply.

        @raise UnknownSession: if no session has this identifier.
        """
        client = self._drop(sessionId)
        if client is None:
            raise UnknownSession(f"Invalid session id: {sessionId}")
        # destroy() fails the QUIT it does not wait for.
        if client.authenticated:
            client.quit().addErrback(lambda ignored: None)
        client.destroy()

    def disconnectAll(self) -> None:
        for sessionId in list(self._sessions):
            self.disconnect(sessionId)
