# -*- test-case-name: txftp.test.test_transfer -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Local ends of file transfers: where downloaded bytes go and where uploaded
bytes come from.
"""

from __future__ import annotations

import io
from typing import IO, Callable, Tuple, Union

import attr
from zope.interface import implementer

from twisted.internet.interfaces import IConsumer
from twisted.logger import Logger
from twisted.python.filepath import FilePath

from txftp.error import LocalIOError

_log = Logger()

Source = Union[bytes, str, FilePath, IO[bytes]]


@attr.s(frozen=True)
class TransferProgress:
    """
    How far a transfer has got.

    @ivar action: C{"get"} or C{"put"}.
    @ivar totalBytes: expected size, C{0} when unknown.
    """

    filename: str = attr.ib()
    action: str = attr.ib()
    totalBytes: int = attr.ib()
    transferredBytes: int = attr.ib()


def _asFilePath(path: Union[str, FilePath]) -> FilePath:
    if isinstance(path, FilePath):
        return path
    return FilePath(path)


class LocalFileSink:
    """
    A local file being filled with downloaded bytes.
    """

    def __init__(self, path: FilePath, fileObj: IO[bytes]) -> None:
        self.path = path
        self._file = fileObj

    @classmethod
    def open(cls, path: Union[str, FilePath]) -> "LocalFileSink":
        path = _asFilePath(path)
        try:
            fileObj = path.open("w")
        except OSError as e:
            raise LocalIOError(f"Cannot open {path.path} for writing", e)
        return cls(path, fileObj)

    def write(self, data: bytes) -> None:
        try:
            self._file.write(data)
        except OSError as e:
            raise LocalIOError(f"Cannot write to {self.path.path}", e)

    def finish(self) -> None:
        """
        Flush and close the file.
        """
        try:
            self._file.flush()
            self._file.close()
        except OSError as e:
            raise LocalIOError(f"Cannot write to {self.path.path}", e)

    def abort(self) -> None:
        """
        Close the file after a failed transfer.
        """
        if self._file.closed:
            return
        with _log.failuresHandled("while closing {path}", path=self.path.path):
            self._file.close()


def openSource(source: Source) -> Tuple[IO[bytes], int, bool]:
    """
    Turn the source of an upload into a readable file object.

    @param source: the bytes to upload, the path of a local file, or an
        already open binary file object.

    @return: a 3-tuple of the file object, its size (C{0} when unknown) and
        whether the caller is responsible for closing it.

    @raise LocalIOError: if a local file does not exist or cannot be opened.
    """
    if isinstance(source, bytes):
        return io.BytesIO(source), len(source), True
    if isinstance(source, (str, FilePath)):
        path = _asFilePath(source)
        if not path.exists():
            raise LocalIOError("Local file doesn't exist.", path.path)
        try:
            return path.open("r"), path.getsize(), True
        except OSError as e:
            raise LocalIOError(f"Cannot open {path.path} for reading", e)
    return source, 0, False


@implementer(IConsumer)
class ProgressConsumer:
    """
    Pass writes through to C{consumer}, reporting the running total to
    C{progress} after each one.
    """

    transferred = 0

    def __init__(self, consumer: IConsumer,
                 progress: Callable[[int], object]) -> None:
        self._consumer = consumer
        self._progress = progress

    def registerProducer(self, producer, streaming: bool) -> None:
        self._consumer.registerProducer(producer, streaming)

    def unregisterProducer(self) -> None:
        self._consumer.unregisterProducer()

    def write(self, data: bytes) -> None:
        self._consumer.write(data)
        self.transferred += len(data)
        self._progress(self.transferred)
