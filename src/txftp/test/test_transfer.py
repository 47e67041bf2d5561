# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Tests for L{txftp._transfer}.
"""

import io

from twisted.internet.testing import StringTransport
from twisted.python.filepath import FilePath
from twisted.trial.unittest import SynchronousTestCase

from txftp._transfer import LocalFileSink, ProgressConsumer, openSource
from txftp.error import LocalIOError


class LocalFileSinkTests(SynchronousTestCase):
    def test_write(self):
        path = FilePath(self.mktemp())
        sink = LocalFileSink.open(path.path)
        sink.write(b"hello ")
        sink.write(b"world")
        sink.finish()
        self.assertEqual(path.getContent(), b"hello world")

    def test_openFails(self):
        """
        A destination in a missing directory cannot be opened.
        """
        path = FilePath(self.mktemp()).child("missing").child("file")
        self.assertRaises(LocalIOError, LocalFileSink.open, path)

    def test_abort(self):
        path = FilePath(self.mktemp())
        sink = LocalFileSink.open(path)
        sink.abort()
        sink.abort()
        self.assertTrue(path.exists())


class OpenSourceTests(SynchronousTestCase):
    def test_bytes(self):
        fileObj, size, owned = openSource(b"payload")
        self.assertEqual(fileObj.read(), b"payload")
        self.assertEqual(size, 7)
        self.assertTrue(owned)

    def test_path(self):
        path = FilePath(self.mktemp())
        path.setContent(b"on disk")
        fileObj, size, owned = openSource(path.path)
        self.addCleanup(fileObj.close)
        self.assertEqual(fileObj.read(), b"on disk")
        self.assertEqual(size, 7)
        self.assertTrue(owned)

    def test_missingPath(self):
        exc = self.assertRaises(LocalIOError, openSource, self.mktemp())
        self.assertEqual(exc.args[0], "Local file doesn't exist.")

    def test_fileObject(self):
        """
        Open file objects are used as they are and left to the caller.
        """
        stream = io.BytesIO(b"stream")
        self.assertEqual(openSource(stream), (stream, 0, False))


class ProgressConsumerTests(SynchronousTestCase):
    def test_write(self):
        transport = StringTransport()
        reports = []
        consumer = ProgressConsumer(transport, reports.append)
        consumer.write(b"abc")
        consumer.write(b"defg")
        self.assertEqual(transport.value(), b"abcdefg")
        self.assertEqual(reports, [3, 7])

    def test_producer(self):
        transport = StringTransport()
        consumer = ProgressConsumer(transport, lambda n: None)
        producer = object()
        consumer.registerProducer(producer, False)
        self.assertIs(transport.producer, producer)
        self.assertFalse(transport.streaming)
        consumer.unregisterProducer()
        self.assertIsNone(transport.producer)
