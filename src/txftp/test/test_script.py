# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Tests for L{txftp.scripts.ftpclient}.
"""

import io
from datetime import datetime

from twisted.internet.testing import MemoryReactorClock
from twisted.python import usage
from twisted.trial.unittest import SynchronousTestCase

from txftp.listing import FileEntry, FileType
from txftp.scripts import ftpclient
from txftp.test._server import FakeFTPServer


class OptionsTests(SynchronousTestCase):
    def parse(self, *argv):
        config = ftpclient.Options()
        config.parseOptions(list(argv))
        return config

    def test_defaults(self):
        config = self.parse("pwd")
        self.assertEqual(config["host"], "localhost")
        self.assertEqual(config["port"], 21)
        self.assertIsNone(config["user"])
        self.assertFalse(config["debug"])
        self.assertEqual(config.subCommand, "pwd")

    def test_connectionOptions(self):
        config = self.parse("-h", "ftp.example.com", "-p", "2121",
                            "-u", "alice", "--password", "secret",
                            "--timeout", "2.5", "-d", "ls", "/pub")
        self.assertEqual(config["host"], "ftp.example.com")
        self.assertEqual(config["port"], 2121)
        self.assertEqual(config["user"], "alice")
        self.assertEqual(config["password"], "secret")
        self.assertEqual(config["timeout"], 2.5)
        self.assertTrue(config["debug"])
        self.assertEqual(config.subOptions.path, "/pub")

    def test_getDefaultsToBasename(self):
        config = self.parse("get", "/pub/README")
        self.assertEqual(config.subOptions.remote, "/pub/README")
        self.assertEqual(config.subOptions.local, "README")

    def test_rename(self):
        config = self.parse("rename", "a", "b")
        self.assertEqual((config.subOptions.fromPath,
                          config.subOptions.toPath), ("a", "b"))

    def test_noCommand(self):
        self.assertRaises(usage.UsageError, self.parse)

    def test_missingArgument(self):
        self.assertRaises(usage.UsageError, self.parse, "put", "local")


class FormatEntryTests(SynchronousTestCase):
    def test_directory(self):
        entry = FileEntry("pub", FileType.DIRECTORY,
                          datetime(2001, 1, 2, 3, 4), 512)
        self.assertEqual(ftpclient.formatEntry(entry),
                         "d          512 2001-01-02 03:04 pub")

    def test_noTime(self):
        entry = FileEntry("f", FileType.FILE, size=3)
        self.assertEqual(ftpclient.formatEntry(entry),
                         "-            3 - f")


class RunCommandTests(SynchronousTestCase):
    def setUp(self):
        self.reactor = MemoryReactorClock()
        self.server = FakeFTPServer(self, self.reactor)
        self.stderr = io.StringIO()

    def runArgs(self, *argv):
        config = ftpclient.Options()
        config.parseOptions(list(argv))
        return ftpclient.runCommand(self.reactor, config, stderr=self.stderr)

    def test_mkdir(self):
        """
        The command runs once logged in, followed by QUIT.
        """
        d = self.runArgs("mkdir", "new")
        self.server.login()
        self.server.expect("MKD new")
        self.server.reply('257 "new" created')
        self.server.expect("QUIT")
        self.server.reply("221 Goodbye.")
        self.successResultOf(d)
        self.assertFalse(self.server.transport.connected)

    def test_failure(self):
        """
        FTP errors are reported and turn into exit status 1.
        """
        d = self.runArgs("delete", "missing")
        self.server.login()
        self.server.expect("DELE missing")
        self.server.reply("550 No such file")
        self.server.expect("QUIT")
        self.server.reply("221 Goodbye.")
        failure = self.failureResultOf(d, SystemExit)
        self.assertEqual(failure.value.code, 1)
        self.assertEqual(self.stderr.getvalue(), "Error: 550 No such file\n")
        self.assertFalse(self.server.transport.connected)

    def test_timeout(self):
        """
        A server that does not answer in time is given up on.
        """
        d = self.runArgs("--timeout", "5", "pwd")
        self.reactor.advance(5)
        failure = self.failureResultOf(d, SystemExit)
        self.assertEqual(failure.value.code, 1)
        self.assertTrue(self.stderr.getvalue().startswith("Error: "))
