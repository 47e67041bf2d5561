# -*- test-case-name: txftp.test.test_script -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
A command line FTP client::

    txftp --host ftp.example.com --user me --password secret ls /pub
    txftp -h ftp.example.com get /pub/README README
"""

import os
import posixpath
import sys

from twisted.internet.defer import TimeoutError
from twisted.internet.task import react
from twisted.logger import (
    FilteringLogObserver,
    LogLevel,
    LogLevelFilterPredicate,
    globalLogBeginner,
    textFileLogObserver,
)
from twisted.python import usage

from txftp.client import FTP_PORT
from txftp.error import FTPError
from txftp.listing import FileType
from txftp.reply import parsePWDResponse
from txftp.sessions import FTPSessionManager


class _PathOptions(usage.Options):
    path = None

    def parseArgs(self, path=None):
        self.path = path


class LsOptions(_PathOptions):
    synopsis = "[path]"


class ListOptions(_PathOptions):
    synopsis = "[path]"


class GetOptions(usage.Options):
    synopsis = "<remote path> [local path]"

    def parseArgs(self, remote, local=None):
        self.remote = remote
        self.local = local or posixpath.basename(remote)


class PutOptions(usage.Options):
    synopsis = "<local path> <remote path>"

    def parseArgs(self, local, remote):
        self.local = local
        self.remote = remote


class RenameOptions(usage.Options):
    synopsis = "<from> <to>"

    def parseArgs(self, fromPath, toPath):
        self.fromPath = fromPath
        self.toPath = toPath


class _OnePathOptions(usage.Options):
    synopsis = "<path>"

    def parseArgs(self, path):
        self.path = path


class PwdOptions(usage.Options):
    pass


class Options(usage.Options):
    synopsis = "[options] <command> [arguments]"

    optParameters = [
        ["host", "h", "localhost", "FTP server host name."],
        ["port", "p", FTP_PORT, "FTP server control port.", int],
        ["user", "u", None, "User name (anonymous if omitted)."],
        ["password", None, None, "Password."],
        ["timeout", "t", None, "Seconds to wait for the server.", float],
    ]

    optFlags = [
        ["debug", "d", "Log every command and reply."],
    ]

    subCommands = [
        ["ls", None, LsOptions, "List a directory, parsed."],
        ["list", None, ListOptions, "List a directory, raw LIST output."],
        ["get", None, GetOptions, "Download a file."],
        ["put", None, PutOptions, "Upload a file."],
        ["rename", None, RenameOptions, "Rename a file."],
        ["mkdir", None, _OnePathOptions, "Create a directory."],
        ["rmdir", None, _OnePathOptions, "Remove a directory."],
        ["delete", None, _OnePathOptions, "Delete a file."],
        ["pwd", None, PwdOptions, "Print the working directory."],
    ]

    def postOptions(self):
        if self.subCommand is None:
            raise usage.UsageError("No command given.")


def formatEntry(entry):
    kind = "d" if entry.type is FileType.DIRECTORY else "-"
    when = entry.time.strftime("%Y-%m-%d %H:%M") if entry.time else "-"
    return f"{kind} {entry.size:>12} {when} {entry.name}"


def _ls(client, options):
    def show(entries):
        for entry in entries:
            print(formatEntry(entry))

    return client.ls(options.path or ".").addCallback(show)


def _list(client, options):
    return client.list(options.path or "").addCallback(
        lambda text: sys.stdout.write(text)
    )


def _pwd(client, options):
    return client.pwd().addCallback(
        lambda response: print(parsePWDResponse(response.text))
    )


COMMANDS = {
    "ls": _ls,
    "list": _list,
    "get": lambda client, options: client.get(options.remote, options.local),
    "put": lambda client, options: client.put(options.local, options.remote),
    "rename": lambda client, options: client.rename(options.fromPath,
                                                    options.toPath),
    "mkdir": lambda client, options: client.mkd(options.path),
    "rmdir": lambda client, options: client.rmd(options.path),
    "delete": lambda client, options: client.dele(options.path),
    "pwd": _pwd,
}


def startLogging(debug, stream=sys.stderr):
    level = LogLevel.debug if debug else LogLevel.warn
    observer = FilteringLogObserver(
        textFileLogObserver(stream),
        [LogLevelFilterPredicate(defaultLogLevel=level)],
    )
    globalLogBeginner.beginLoggingTo([observer], redirectStandardIO=False)


def runCommand(reactor, config, stderr=None):
    """
    Run the command chosen in C{config} on a one-shot session.

    @return: a L{Deferred} firing when done.  An L{FTPError} or a timeout
        is reported on C{stderr} and turned into exit status 1.
    """
    if stderr is None:
        stderr = sys.stderr
    manager = FTPSessionManager(
        defaults={
            "host": config["host"],
            "port": config["port"],
            "user": config["user"],
            "password": config["password"],
        },
        commandTimeout=config["timeout"],
        reactor=reactor,
    )
    command = COMMANDS[config.subCommand]

    def failed(failure):
        failure.trap(FTPError, TimeoutError)
        stderr.write(f"Error: {failure.getErrorMessage()}\n")
        raise SystemExit(1)

    d = manager.runOnce(lambda client: command(client, config.subOptions))
    d.addCallbacks(lambda ignored: None, failed)
    return d


def main(reactor, *argv):
    config = Options()
    try:
        config.parseOptions(argv)
    except usage.UsageError as e:
        sys.stderr.write(f"{config}\n{os.path.basename(sys.argv[0])}: {e}\n")
        raise SystemExit(2)
    startLogging(config["debug"])
    return runCommand(reactor, config)


def run():
    react(main, sys.argv[1:])


if __name__ == "__main__":
    run()
