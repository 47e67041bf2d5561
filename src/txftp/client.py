# -*- test-case-name: txftp.test.test_client -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
An FTP client holding one control connection, with passive mode transfers.

Every operation returns a L{Deferred}.  Commands from any number of callers
are sent one at a time, in the order they were issued; the client connects,
queries the server's features and logs in on demand, before the first
command that needs it.
"""

from __future__ import annotations

from typing import FrozenSet, List, Optional

from twisted.internet.defer import (
    Deferred,
    DeferredLock,
    fail,
    gatherResults,
    succeed,
)
from twisted.internet.endpoints import TCP4ClientEndpoint, connectProtocol
from twisted.internet.error import ConnectionDone
from twisted.internet.task import LoopingCall
from twisted.logger import Logger, LogLevel
from twisted.protocols.basic import FileSender
from twisted.python.failure import Failure

from txftp._queue import Command, CommandQueue, ReplyCorrelator
from txftp._transfer import (
    LocalFileSink,
    ProgressConsumer,
    Source,
    TransferProgress,
    openSource,
)
from txftp.command import (
    BOOTSTRAP_VERBS,
    DATA_TRANSFER,
    TRANSFER_COMPLETE,
    UPLOAD,
    MarkExpectation,
    TransferType,
    Verb,
    formatCommand,
    verbOf,
)
from txftp.data import PassiveDataChannel, connectPassive, decodeHostPort
from txftp.error import (
    CommandFailed,
    ConnectionFailed,
    ConnectionLost,
    LocalIOError,
    LoginFailed,
    UnexpectedReply,
)
from txftp.listing import parseEntries
from txftp.protocol import FTPControlProtocol
from txftp.reply import Response

FTP_PORT = 21

# Reply codes
USER_LOGGED_IN = 230
NOT_IMPLEMENTED_SUPERFLUOUS = 202
NEED_PASSWORD = 331
NEED_ACCOUNT = 332
NAME_SYSTEM_TYPE = 215
SYNTAX_ERROR = 500
NOT_IMPLEMENTED = 502
DATA_CONNECTION_MARKS = (125, 150)

USER_REPLIES = (USER_LOGGED_IN, NEED_PASSWORD, NEED_ACCOUNT)
LOGGED_IN_REPLIES = (USER_LOGGED_IN, NOT_IMPLEMENTED_SUPERFLUOUS)
STAT_UNSUPPORTED = (SYNTAX_ERROR, NOT_IMPLEMENTED)

# Systems whose STAT output cannot be used as a listing.
NON_COMPLIANT_SYSTEMS = ("hummingbird",)


def _maybeGlobalReactor(maybeReactor):
    if maybeReactor is None:
        from twisted.internet import reactor

        return reactor
    return maybeReactor


def parseFeatures(text: str) -> FrozenSet[str]:
    """
    Extract feature names from a multi-line reply to FEAT, ignoring its first
    and last lines.  Only the first word of each feature line is kept, lower
    cased.
    """
    features = set()
    for line in text.split("\n")[1:-1]:
        words = line.split()
        if words:
            features.add(words[0].lower())
    return frozenset(features)


def _checkDataMark(response: Response) -> Response:
    if response.code not in DATA_CONNECTION_MARKS:
        raise UnexpectedReply(response)
    return response


def _trapCommandFailed(failure: Failure, default):
    failure.trap(CommandFailed)
    return default


class FTPClient:
    """
    A Twisted FTP client.

    @ivar host: server host name.
    @ivar port: server control port.
    @ivar user: user name, C{"anonymous"} if unset.
    @ivar password: password, C{"@anonymous"} if unset.
    @ivar account: account information sent if the server asks for it.
    @ivar authenticated: whether the login exchange has succeeded on the
        current connection.
    @ivar authenticating: whether a login exchange is under way.
    @ivar features: lower cased feature names reported by FEAT, or L{None}
        before they were queried.
    @ivar system: lower cased reply to SYST, if the server answered it.
    @ivar transferType: the last L{TransferType} the server accepted.
    @ivar useList: use LIST rather than STAT for L{ls}; set once the server
        turned out not to support STAT, or reported a system whose STAT
        output is not a listing.
    """

    idleInterval = 30
    encoding = "utf-8"
    protocol = FTPControlProtocol

    _log = Logger()

    def __init__(
        self,
        host: str = "localhost",
        port: int = FTP_PORT,
        user: Optional[str] = None,
        password: Optional[str] = None,
        account: str = "",
        reactor=None,
        connectTimeout: float = 30,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.account = account
        self.connectTimeout = connectTimeout
        self._reactor = _maybeGlobalReactor(reactor)

        self._queue = CommandQueue(self._transmit)
        self._correlator = ReplyCorrelator(self._queue)
        self._control: Optional[FTPControlProtocol] = None
        self._connecting: Optional[List[Deferred]] = None

        self.authenticated = False
        self.authenticating = False
        self._authWaiters: List[Deferred] = []

        self.features: Optional[FrozenSet[str]] = None
        self.system: Optional[str] = None
        self._featureWaiters: Optional[List[Deferred]] = None

        self.transferType = None
        self.useList = False
        self._keepAlive: Optional[LoopingCall] = None
        self._transferLock = DeferredLock()

    # Hooks.  Override these to observe the client.

    def commandSent(self, text: str) -> None:
        """
        A command line was written to the control connection.
        """
        if verbOf(text) is Verb.PASS:
            text = "PASS ****"
        self._log.debug("<-- {command}", command=text)

    def dataLineReceived(self, line: str) -> None:
        """
        A line arrived on the control connection.
        """
        self._log.debug("--> {line}", line=line)

    def transportError(self, reason: Failure) -> None:
        """
        The control connection broke.
        """
        self._log.error(
            "Control connection to {host}:{port} lost: {reason}",
            host=self.host,
            port=self.port,
            reason=reason.getErrorMessage(),
        )

    def transferProgress(self, progress: TransferProgress) -> None:
        """
        Some bytes of a file transfer went through.
        """
        self._log.debug(
            "{action} {filename}: {transferred}/{total}",
            action=progress.action,
            filename=progress.filename,
            transferred=progress.transferredBytes,
            total=progress.totalBytes,
        )

    # Control connection

    def _ensureConnected(self) -> Deferred:
        if self._control is not None:
            return succeed(self._control)
        d = Deferred()
        if self._connecting is not None:
            self._connecting.append(d)
            return d
        waiters = self._connecting = [d]
        self.authenticated = False
        self._correlator.ignoreCode = None
        endpoint = TCP4ClientEndpoint(
            self._reactor, self.host, self.port, timeout=self.connectTimeout
        )
        connectProtocol(endpoint, self.protocol(self, self.encoding)).addBoth(
            self._connectDone, waiters
        )
        return d

    def _connectDone(self, result, waiters: List[Deferred]) -> None:
        if waiters is not self._connecting:
            # Abandoned by destroy(); a connection made since is not used.
            if not isinstance(result, Failure):
                result.client = None
                result.transport.loseConnection()
            return
        self._connecting = None
        if isinstance(result, Failure):
            self._log.warn(
                "Could not connect to {host}:{port}: {reason}",
                host=self.host,
                port=self.port,
                reason=result.getErrorMessage(),
            )
            result = Failure(ConnectionFailed(
                f"Could not connect to {self.host}:{self.port}", result.value))
            for d in waiters:
                d.errback(result)
            return
        self._control = result
        for d in waiters:
            d.callback(result)

    def controlConnectionLost(self, control: FTPControlProtocol,
                              reason: Failure) -> None:
        """
        Called by the control protocol when its connection is gone.
        """
        if control is not self._control:
            return
        self._control = None
        self._resetState()
        if not reason.check(ConnectionDone):
            self.transportError(reason)
        self._queue.failAll(
            Failure(ConnectionLost("FTP connection lost", reason.value))
        )

    def _resetState(self) -> None:
        self.authenticated = False
        self.features = None
        self.system = None
        self.transferType = None
        self._correlator.ignoreCode = None

    def replyReceived(self, response: Response) -> None:
        self._correlator.replyReceived(response)

    def _transmit(self, text: str) -> None:
        self._control.sendCommand(text)
        self.commandSent(text)

    # Commands

    def _enqueue(self, command: Command) -> Deferred:
        d = self._ensureConnected()
        d.addCallback(lambda ignored: self._queue.enqueue(command))
        return d

    def _followUp(self, text: str,
                  expectation: Optional[MarkExpectation] = None) -> Deferred:
        """
        Queue C{text} ahead of everything else.  Only valid from a callback
        on the result of the command that just completed, so the server sees
        both back to back.
        """
        command = Command(text, expectation=expectation)
        self._queue.pushFront(command)
        return command.deferred

    def execute(self, text: str,
                expectation: Optional[MarkExpectation] = None) -> Deferred:
        """
        Queue a command line, logging in first if needed.

        @return: a L{Deferred} firing with the final L{Response}, or failing
            with L{CommandFailed} if the reply code is above 399.
        """
        command = Command(text, expectation=expectation)
        if self.authenticated or verbOf(text) in BOOTSTRAP_VERBS:
            return self._enqueue(command)
        d = self.ensureFeatures()
        d.addCallback(lambda ignored: self.authenticate())
        d.addCallback(lambda ignored: self._enqueue(command))
        return d

    def raw(self, verb, *args) -> Deferred:
        """
        Send C{verb} with C{args} and return the reply.
        """
        return self.execute(formatCommand(verb, *args))

    def pwd(self) -> Deferred:
        return self.raw(Verb.PWD)

    def cwd(self, path: str) -> Deferred:
        return self.raw(Verb.CWD, path)

    def cdup(self) -> Deferred:
        return self.raw(Verb.CDUP)

    def mkd(self, path: str) -> Deferred:
        return self.raw(Verb.MKD, path)

    def rmd(self, path: str) -> Deferred:
        return self.raw(Verb.RMD, path)

    def dele(self, path: str) -> Deferred:
        return self.raw(Verb.DELE, path)

    def size(self, path: str) -> Deferred:
        return self.raw(Verb.SIZE, path)

    def noop(self) -> Deferred:
        return self.raw(Verb.NOOP)

    def quit(self) -> Deferred:
        return self.raw(Verb.QUIT)

    # Features

    def ensureFeatures(self) -> Deferred:
        """
        Query FEAT and SYST once per connection.

        A failed FEAT leaves an empty feature set; a failed SYST leaves
        L{system} unset.

        @return: a L{Deferred} firing with the feature set.
        """
        if self.features is not None:
            return succeed(self.features)
        d = Deferred()
        if self._featureWaiters is not None:
            self._featureWaiters.append(d)
            return d
        self._featureWaiters = [d]

        query = self.raw(Verb.FEAT)
        query.addCallback(lambda response: parseFeatures(response.text))
        query.addErrback(_trapCommandFailed, frozenset())
        query.addCallback(self._gotFeatures)
        query.addCallback(self._gotSystem)
        query.addErrback(_trapCommandFailed, None)
        query.addCallback(lambda ignored: self.features)
        query.addBoth(self._featuresDone)
        return d

    def _gotFeatures(self, features: FrozenSet[str]) -> Deferred:
        self.features = features
        return self.raw(Verb.SYST)

    def _gotSystem(self, response: Response) -> None:
        if response.code == NAME_SYSTEM_TYPE:
            self.system = response.text[4:].strip().lower()
            if any(name in self.system for name in NON_COMPLIANT_SYSTEMS):
                self.useList = True

    def _featuresDone(self, result) -> None:
        waiters, self._featureWaiters = self._featureWaiters, None
        for d in waiters:
            if isinstance(result, Failure):
                d.errback(result)
            else:
                d.callback(result)

    def hasFeature(self, name: str) -> bool:
        """
        Did the server advertise feature C{name}?  Case insensitive.
        """
        return bool(self.features) and name.lower() in self.features

    # Login

    def authenticate(self, user: Optional[str] = None,
                     password: Optional[str] = None) -> Deferred:
        """
        Log in with USER and PASS (and ACCT, if the server asks).

        Callers arriving while a login is under way wait for its outcome
        rather than starting another one.

        @return: a L{Deferred} firing when logged in, or failing with
            L{LoginFailed}.
        """
        if self.authenticated:
            return succeed(None)
        d = Deferred()
        self._authWaiters.append(d)
        if self.authenticating:
            return d
        self.authenticating = True

        user = user or self.user or "anonymous"
        password = password or self.password or "@anonymous"
        login = self.raw(Verb.USER, user)
        login.addCallback(self._userAccepted, password)
        login.addCallback(self._loggedIn, user, password)
        login.addErrback(self._loginRejected)
        login.addBoth(self._authDone)
        return d

    def _userAccepted(self, response: Response, password: str) -> Deferred:
        if response.code not in USER_REPLIES:
            raise LoginFailed("Login not accepted", response.code,
                              response.text)
        d = self._followUp(formatCommand(Verb.PASS, password))
        d.addCallback(self._passwordAccepted)
        return d

    def _passwordAccepted(self, response: Response) -> Deferred:
        if response.code in LOGGED_IN_REPLIES:
            return response
        if response.code == NEED_ACCOUNT:
            d = self._followUp(formatCommand(Verb.ACCT, self.account))
            d.addCallback(self._accountAccepted)
            return d
        raise LoginFailed("Login not accepted", response.code, response.text)

    def _accountAccepted(self, response: Response) -> Response:
        if response.code not in LOGGED_IN_REPLIES:
            raise LoginFailed("Account not accepted", response.code,
                              response.text)
        return response

    def _loggedIn(self, response: Response, user: str,
                  password: str) -> Deferred:
        self.user = user
        self.password = password
        d = self._enqueue(
            Command(formatCommand(Verb.TYPE, TransferType.BINARY.value))
        )
        d.addCallback(self._typeSet, TransferType.BINARY)
        d.addErrback(self._typeRefused)
        d.addCallback(lambda ignored: self._markAuthenticated(response))
        return d

    def _typeRefused(self, failure: Failure) -> None:
        failure.trap(CommandFailed)
        self._log.warn("Could not switch to binary mode: {reason}",
                       reason=failure.getErrorMessage())

    def _markAuthenticated(self, response: Response) -> Response:
        self.authenticated = True
        return response

    def _loginRejected(self, failure: Failure) -> Failure:
        if failure.check(CommandFailed):
            return Failure(LoginFailed("Login not accepted",
                                       failure.value.code,
                                       failure.value.text))
        return failure

    def _authDone(self, result) -> None:
        self.authenticating = False
        waiters, self._authWaiters = self._authWaiters, []
        for d in waiters:
            if isinstance(result, Failure):
                d.errback(result)
            else:
                d.callback(result)

    # Transfer type

    def setType(self, transferType) -> Deferred:
        """
        Switch representation type, unless the server already uses it.
        """
        if self.transferType is transferType:
            return succeed(None)
        d = self.raw(Verb.TYPE, transferType.value)
        return d.addCallback(self._typeSet, transferType)

    def _typeSet(self, response: Response, transferType) -> Response:
        self.transferType = transferType
        return response

    def _restoreBinary(self, result):
        if self._control is None or not self.authenticated:
            return result

        def restoreFailed(failure):
            self._log.failure("Could not restore binary mode", failure,
                              LogLevel.warn)

        d = self.setType(TransferType.BINARY)
        d.addErrback(restoreFailed)
        d.addCallback(lambda ignored: result)
        return d

    # Data connections
    #
    # One transfer runs at a time, under _transferLock, and its transfer
    # command follows PASV with nothing in between.

    def openPassiveChannel(self) -> Deferred:
        """
        Send PASV and connect to the address the server announces.

        Any transfer under way is waited for first, and the next one waits
        for the returned channel to close.

        @return: a L{Deferred} firing with a connected
            L{PassiveDataChannel}.  It fails with
            L{PassiveModeError<txftp.error.PassiveModeError>}, without any
            connection attempt, if the reply holds no address.
        """
        d = self._transferLock.acquire()
        d.addCallback(lambda ignored: self.raw(Verb.PASV))
        d.addCallback(self._connectAnnounced)
        return self._holdUntilClosed(d)

    def _connectAnnounced(self, response: Response) -> Deferred:
        host, port = decodeHostPort(response.text)
        return connectPassive(self._reactor, host, port, self.connectTimeout)

    def _holdUntilClosed(self, d: Deferred) -> Deferred:
        """
        Keep the transfer lock until the channel C{d} fires with is closed,
        or release it right away if C{d} fails.
        """
        def opened(channel):
            channel.whenClosed().addBoth(
                lambda ignored: self._transferLock.release()
            )
            return channel

        def failed(failure):
            self._transferLock.release()
            return failure

        return d.addCallbacks(opened, failed)

    def _passiveCommand(self, text: str, expectation: MarkExpectation,
                        completion: Optional[Command] = None) -> Deferred:
        """
        Send PASV, then C{text} as soon as PASV is answered, connecting to
        the announced address meanwhile.

        @param completion: a placeholder parked at the head of the queue
            when C{text} is answered with a mark, to receive the final reply
            of the transfer.

        @return: a L{Deferred} firing with a 2-tuple of the connected
            L{PassiveDataChannel} and a L{Deferred} for the mark answering
            C{text}.
        """
        def announced(response):
            connecting = self._connectAnnounced(response)
            command = self._followUp(text, expectation)
            command.addCallback(_checkDataMark)
            if completion is not None:
                command.addCallback(self._parkCompletion, completion)

            def orphaned(reason):
                self._log.debug("{command} failed: {reason}", command=text,
                                reason=reason.getErrorMessage())

            def connectFailed(failure):
                command.addErrback(orphaned)
                if completion is not None:
                    completion.deferred.addErrback(orphaned)
                return failure

            connecting.addCallbacks(lambda channel: (channel, command),
                                    connectFailed)
            return connecting

        return self.raw(Verb.PASV).addCallback(announced)

    def _parkCompletion(self, response: Response,
                        completion: Command) -> Response:
        # The final reply of this transfer belongs to it, not to whatever
        # got queued meanwhile.
        self._queue.pushFront(completion)
        return response

    def _transfer(self, channel: PassiveDataChannel, *deferreds) -> Deferred:
        """
        Wait for a data connection to close and for C{deferreds}.  The first
        failure among them closes the data connection and is the result.

        @return: a L{Deferred} firing with the list of results, the data
            connection's first.
        """
        def abort(failure):
            channel.close()
            return failure.value.subFailure

        d = gatherResults([channel.whenClosed()] + list(deferreds),
                          consumeErrors=True)
        return d.addErrback(abort)

    def list(self, path: str = "") -> Deferred:
        """
        Retrieve a listing of C{path} with LIST, in ASCII mode.

        No other transfer starts until binary mode is restored.

        @return: a L{Deferred} firing with the listing text.
        """
        return self._transferLock.run(self._list, path)

    def _list(self, path: str) -> Deferred:
        d = self.setType(TransferType.ASCII)
        d.addCallback(
            lambda ignored: self._passiveCommand(
                formatCommand(Verb.LIST, path), DATA_TRANSFER
            )
        )
        d.addCallback(self._listOn)
        d.addBoth(self._restoreBinary)
        return d

    def _listOn(self, opened) -> Deferred:
        channel, command = opened
        chunks: List[bytes] = []
        channel.setSink(chunks.append)
        d = self._transfer(channel, command)
        d.addCallback(
            lambda ignored: b"".join(chunks).decode(self.encoding, "replace")
        )
        return d

    def retrieve(self, path: str) -> Deferred:
        """
        Start a RETR of C{path}.

        @return: a L{Deferred} firing with the paused L{PassiveDataChannel}
            once the server announced the transfer.  Install a sink on it,
            resume it and wait for L{PassiveDataChannel.whenClosed}.  No
            other transfer starts before it is closed.
        """
        d = self._transferLock.acquire()
        d.addCallback(
            lambda ignored: self._passiveCommand(
                formatCommand(Verb.RETR, path), DATA_TRANSFER
            )
        )
        d.addCallback(self._retrieveOn)
        return self._holdUntilClosed(d)

    def _retrieveOn(self, opened) -> Deferred:
        channel, command = opened
        channel.pauseProducing()

        def failed(failure):
            channel.close()
            return failure

        return command.addCallbacks(lambda ignored: channel, failed)

    def get(self, remotePath: str, destination=None) -> Deferred:
        """
        Download C{remotePath}.

        @param destination: a local path (C{str} or
            L{FilePath<twisted.python.filepath.FilePath>}) to write the file
            to.  If omitted, this is L{retrieve}.

        @return: a L{Deferred} firing with L{None} once the file is written.
        """
        if destination is None:
            return self.retrieve(remotePath)
        try:
            sink = LocalFileSink.open(destination)
        except LocalIOError:
            return fail()

        def aborted(failure):
            sink.abort()
            return failure

        d = self.retrieve(remotePath)
        d.addCallback(self._download, sink, remotePath)
        d.addErrback(aborted)
        return d

    def _download(self, channel: PassiveDataChannel, sink: LocalFileSink,
                  remotePath: str) -> Deferred:
        def write(data):
            sink.write(data)
            self.transferProgress(TransferProgress(
                remotePath, "get", 0, channel.bytesReceived))

        channel.setSink(write)
        channel.resumeProducing()
        d = channel.whenClosed()
        d.addCallback(lambda ignored: sink.finish())
        return d

    def put(self, source: Source, remotePath: str) -> Deferred:
        """
        Upload C{source} to C{remotePath} with STOR.

        @param source: the bytes to upload, the path of a local file, or an
            open binary file object (which is left open).

        @return: a L{Deferred} firing with the server's final reply once the
            upload is complete.
        """
        try:
            fileObj, total, owned = openSource(source)
        except LocalIOError:
            return fail()

        def cleanup(result):
            if owned:
                fileObj.close()
            return result

        d = self._transferLock.run(self._store, fileObj, total, remotePath)
        d.addBoth(cleanup)
        return d

    def _store(self, fileObj, total: int, remotePath: str) -> Deferred:
        completion = Command(None, expectation=TRANSFER_COMPLETE)
        d = self._passiveCommand(formatCommand(Verb.STOR, remotePath), UPLOAD,
                                 completion)
        d.addCallback(self._upload, fileObj, total, remotePath, completion)
        return d

    def _upload(self, opened, fileObj, total: int, remotePath: str,
                completion: Command) -> Deferred:
        channel, command = opened

        def progress(transferred):
            self.transferProgress(TransferProgress(
                remotePath, "put", total, transferred))

        def send(ignored):
            if channel.closed:
                raise ConnectionLost("Data connection closed before upload")
            consumer = ProgressConsumer(channel.transport, progress)
            sent = FileSender().beginFileTransfer(fileObj, consumer)
            sent.addCallback(lambda ignored: channel.close())
            return sent

        command.addCallback(send)
        d = self._transfer(channel, command, completion.deferred)
        d.addCallback(lambda results: results[-1])
        return d

    # Compound operations

    def ls(self, path: str = ".") -> Deferred:
        """
        List C{path} as L{FileEntry<txftp.listing.FileEntry>} objects.

        STAT is tried first since it needs no data connection; servers that
        do not support it are listed with LIST from then on.
        """
        if self.useList:
            return self.list(path).addCallback(parseEntries)

        def statFailed(failure):
            failure.trap(CommandFailed)
            if failure.value.code not in STAT_UNSUPPORTED:
                return failure
            self.useList = True
            return self.list(path)

        d = self.raw(Verb.STAT, path)
        d.addCallbacks(lambda response: response.text, statFailed)
        d.addCallback(parseEntries)
        return d

    def rename(self, fromPath: str, toPath: str) -> Deferred:
        """
        Rename with RNFR then RNTO; RNTO is not sent if RNFR fails.

        @return: a L{Deferred} firing with the reply to RNTO.
        """
        d = self.raw(Verb.RNFR, fromPath)
        d.addCallback(
            lambda ignored: self._followUp(formatCommand(Verb.RNTO, toPath))
        )
        return d

    def keepAlive(self, interval: Optional[float] = None) -> None:
        """
        Send NOOP every C{interval} seconds (L{idleInterval} by default),
        replacing any previous keepalive.
        """
        self._stopKeepAlive()
        self._keepAlive = LoopingCall(self._sendKeepAlive)
        self._keepAlive.clock = self._reactor
        self._keepAlive.start(interval or self.idleInterval, now=False)

    def _sendKeepAlive(self) -> None:
        def noopFailed(failure):
            self._log.failure("Keepalive failed", failure, LogLevel.warn)

        self.noop().addErrback(noopFailed)

    def _stopKeepAlive(self) -> None:
        if self._keepAlive is not None and self._keepAlive.running:
            self._keepAlive.stop()
        self._keepAlive = None

    def destroy(self) -> None:
        """
        Stop the keepalive, drop the control connection and fail everything
        still queued with L{ConnectionLost}.

        A connection attempt under way is abandoned: whatever waits for it
        fails, and the connection is closed unused if it completes later.
        """
        self._stopKeepAlive()
        control, self._control = self._control, None
        waiters, self._connecting = self._connecting or [], None
        self._resetState()
        reason = Failure(ConnectionLost("FTP client destroyed"))
        self._queue.failAll(reason)
        if control is not None:
            control.client = None
            control.transport.loseConnection()
        for d in waiters:
            d.errback(reason)
