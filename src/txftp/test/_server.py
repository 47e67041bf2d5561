# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
A scripted FTP server end for the connections clients make through a
L{MemoryReactorClock<twisted.internet.testing.MemoryReactorClock>}.
"""

from twisted.internet.error import ConnectionDone
from twisted.internet.testing import (
    StringTransport,
    StringTransportWithDisconnection,
)
from twisted.python.failure import Failure

FEATURES = ("211-Features:", " MDTM", " SIZE", " UTF8", "211 End")


class FakeFTPServer:
    """
    @ivar protocol: the client's control protocol, once L{accept}ed.
    @ivar transport: where the client's commands end up.
    """

    protocol = None
    transport = None

    def __init__(self, testCase, reactor):
        self.testCase = testCase
        self.reactor = reactor

    def _acceptLatest(self, transport):
        host, port, factory, timeout, bindAddress = self.reactor.tcpClients[-1]
        protocol = factory.buildProtocol(None)
        transport.protocol = protocol
        protocol.makeConnection(transport)
        return protocol

    def accept(self):
        """
        Complete the latest control connection attempt.
        """
        self.transport = StringTransportWithDisconnection()
        self.protocol = self._acceptLatest(self.transport)

    def acceptData(self):
        """
        Complete the latest data connection attempt.

        @return: a 2-tuple of the protocol and its L{StringTransport}.
        """
        transport = StringTransport()
        return self._acceptLatest(transport), transport

    def reply(self, *lines):
        for line in lines:
            self.protocol.dataReceived(line.encode("utf-8") + b"\r\n")

    def sent(self):
        """
        @return: the command lines received since the last call.
        """
        lines = self.transport.value().decode("utf-8").split("\r\n")[:-1]
        self.transport.clear()
        return lines

    def expect(self, *commands):
        self.testCase.assertEqual(self.sent(), list(commands))

    def login(self, system="215 UNIX Type: L8", features=FEATURES):
        """
        Accept the control connection and go through the exchange a client
        opens a connection with.
        """
        self.accept()
        self.reply("220 Welcome to the fake FTP service.")
        self.expect("FEAT")
        self.reply(*features)
        self.expect("SYST")
        self.reply(system)
        self.expect("USER anonymous")
        self.reply("331 Please specify the password.")
        self.expect("PASS @anonymous")
        self.reply("230 Login successful.")
        self.expect("TYPE I")
        self.reply("200 Switching to Binary mode.")

    def passive(self, address="10,0,0,2,4,1"):
        """
        Answer PASV and accept the data connection it leads to.
        """
        self.expect("PASV")
        self.reply(f"227 Entering Passive Mode ({address}).")
        return self.acceptData()


def closeData(protocol):
    """
    The server closes a data connection cleanly.
    """
    protocol.connectionLost(Failure(ConnectionDone()))


def pump(transport):
    """
    Drive the non-streaming producer registered with C{transport} until it
    unregisters.
    """
    while transport.producer is not None:
        transport.producer.resumeProducing()
