# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Tests for L{txftp._queue}.
"""

from twisted.python.failure import Failure
from twisted.trial.unittest import SynchronousTestCase

from txftp._queue import Command, CommandQueue, ReplyCorrelator
from txftp.command import DATA_TRANSFER, TRANSFER_COMPLETE, UPLOAD
from txftp.error import CommandFailed, ConnectionLost
from txftp.reply import Response


def reply(code, text=None):
    return Response(code, text or f"{code} whatever")


class CorrelatorTestsMixin:
    def setUp(self):
        self.sent = []
        self.queue = CommandQueue(self.sent.append)
        self.correlator = ReplyCorrelator(self.queue)

    def enqueue(self, text, expectation=None):
        results = []
        d = self.queue.enqueue(Command(text, expectation=expectation))
        d.addBoth(results.append)
        return results

    def receive(self, *codes):
        for code in codes:
            self.correlator.replyReceived(reply(code))


class CommandQueueTests(CorrelatorTestsMixin, SynchronousTestCase):
    def test_oneInFlight(self):
        """
        Only the head of the queue is sent; the next command goes out once
        the first one has its reply.
        """
        self.enqueue("PWD")
        self.enqueue("NOOP")
        self.assertEqual(self.sent, ["PWD"])
        self.assertTrue(self.queue.inFlight)
        self.receive(257)
        self.assertEqual(self.sent, ["PWD", "NOOP"])
        self.receive(200)
        self.assertFalse(self.queue.inFlight)
        self.assertEqual(len(self.queue), 0)

    def test_order(self):
        """
        Replies complete commands in the order they were queued.
        """
        first = self.enqueue("PWD")
        second = self.enqueue("SYST")
        self.receive(257, 215)
        self.assertEqual(first[0].code, 257)
        self.assertEqual(second[0].code, 215)

    def test_pushFront(self):
        """
        A command pushed to the front while a reply is being delivered is
        sent before everything else still waiting.
        """
        results = []

        def followUp(response):
            command = Command("RNTO b")
            self.queue.pushFront(command)
            command.deferred.addBoth(results.append)

        self.queue.enqueue(Command("RNFR a")).addCallback(followUp)
        self.enqueue("NOOP")
        self.receive(350)
        self.assertEqual(self.sent, ["RNFR a", "RNTO b"])
        self.receive(250)
        self.assertEqual(results[0].code, 250)
        self.assertEqual(self.sent[-1], "NOOP")

    def test_placeholderNotSent(self):
        """
        A command without text is never sent but still waits for a reply.
        """
        results = self.enqueue(None, TRANSFER_COMPLETE)
        self.enqueue("NOOP")
        self.assertEqual(self.sent, [])
        self.receive(226)
        self.assertEqual(results[0].code, 226)
        self.assertEqual(self.sent, ["NOOP"])

    def test_failAll(self):
        first = self.enqueue("PWD")
        second = self.enqueue("NOOP")
        self.queue.failAll(Failure(ConnectionLost()))
        for results in (first, second):
            results[0].trap(ConnectionLost)
        self.assertEqual(len(self.queue), 0)
        self.assertFalse(self.queue.inFlight)


class ReplyCorrelatorTests(CorrelatorTestsMixin, SynchronousTestCase):
    def test_bannerDiscarded(self):
        """
        220 never completes a command.
        """
        results = self.enqueue("PWD")
        self.receive(220)
        self.assertEqual(results, [])
        self.receive(257)
        self.assertEqual(results[0].code, 257)

    def test_emptyQueue(self):
        """
        Replies arriving with nothing queued are dropped.
        """
        self.receive(200)
        results = self.enqueue("PWD")
        self.assertEqual(results, [])

    def test_error(self):
        """
        A code above 399 fails the command with L{CommandFailed}.
        """
        results = self.enqueue("DELE x")
        self.correlator.replyReceived(reply(550, "550 No such file"))
        failure = results[0]
        failure.trap(CommandFailed)
        self.assertEqual(failure.value.code, 550)
        self.assertEqual(failure.value.text, "550 No such file")

    def test_unexpectedMark(self):
        """
        A mark the head command does not expect is dropped.
        """
        results = self.enqueue("NOOP")
        self.receive(150, 226)
        self.assertEqual(results, [])
        self.receive(200)
        self.assertEqual(results[0].code, 200)

    def test_markSuppression(self):
        """
        A data transfer completes once, on its mark; the 226 that follows
        completes nothing, not even a command expecting one.
        """
        listing = self.enqueue("LIST", DATA_TRANSFER)
        placeholder = self.enqueue(None, TRANSFER_COMPLETE)
        self.receive(150)
        self.assertEqual(len(listing), 1)
        self.assertEqual(listing[0].code, 150)
        self.receive(226)
        self.assertEqual(len(listing), 1)
        self.assertEqual(placeholder, [])
        self.receive(226)
        self.assertEqual(placeholder[0].code, 226)

    def test_suppressionWithEmptyQueue(self):
        """
        The trailing 226 of a transfer is swallowed even with nothing queued
        any more, so it cannot disturb a later upload.
        """
        self.enqueue("LIST", DATA_TRANSFER)
        self.receive(150, 226)
        self.assertIsNone(self.correlator.ignoreCode)
        upload = self.enqueue("STOR x", UPLOAD)
        self.receive(150)
        self.assertEqual(upload[0].code, 150)

    def test_suppressedOnce(self):
        """
        Only one reply is swallowed per mark.
        """
        self.enqueue("RETR x", DATA_TRANSFER)
        self.receive(150, 226)
        results = self.enqueue(None, TRANSFER_COMPLETE)
        self.receive(226)
        self.assertEqual(results[0].code, 226)
