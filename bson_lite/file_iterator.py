#!/usr/bin/env python3
"""Constant-memory reader for BSON dump files (as written by ``mongodump``).

A dump file is a flat run of records, each introduced by a 4-byte
little-endian length. Records are read one at a time; the length is
checked against ``max_record_size`` before any payload is read.
"""
import enum
import logging
import os
import stat
import struct
from typing import Any, BinaryIO, Iterator, Optional, Tuple, Union

import bson
from bson.errors import BSONError

from bson_lite.config import (
    DEFAULT_JSON_DEPTH_LIMIT,
    DEFAULT_JSON_OPTIONS,
    DEFAULT_MAX_RECORD_SIZE,
    ReaderSettings,
)
from bson_lite.decoders import DecodeMode, make_decoder
from bson_lite.errors import (
    InvalidMaxRecordSizeError,
    NotAFileError,
    NotReadableError,
    OpenFailedError,
    RecordTooLargeError,
)

logger = logging.getLogger(__name__)

PREFIX_SIZE = 4
_LENGTH = struct.Struct("<I")

_SPECIAL_FILES = (
    (stat.S_ISDIR, "directory"),
    (stat.S_ISFIFO, "fifo"),
    (stat.S_ISSOCK, "socket"),
    (stat.S_ISCHR, "character device"),
    (stat.S_ISBLK, "block device"),
)


class Framing(str, enum.Enum):
    """How the 4-byte length prefix relates to the BSON document."""

    AUTO = "auto"
    # prefix is external: 4 + length bytes per record
    PREFIXED = "prefixed"
    # prefix is the document's own length field: length bytes per record
    DOCUMENT = "document"


class _Exhausted:
    def __bool__(self):
        return False

    def __repr__(self):
        return "<EXHAUSTED>"


EXHAUSTED = _Exhausted()


def _check_regular_file(path: str) -> None:
    try:
        mode = os.stat(path).st_mode
    except OSError:
        raise NotAFileError(path) from None
    if stat.S_ISREG(mode):
        return
    for test, kind in _SPECIAL_FILES:
        if test(mode):
            raise NotAFileError(path, kind)
    raise NotAFileError(path, "special file")


def detect_framing(handle: BinaryIO, max_record_size: int) -> Framing:
    """Guess how the records of an open dump file are framed.

    A BSON document starts with its own total length, so an external prefix
    is immediately followed by the same four bytes. A document can also
    start that way by itself (``{"": False}`` encodes to ``08 00 00 00 08 ...``),
    so a repeated prefix only counts once the bytes after it decode as one
    BSON document. Files too short to tell, and first records too large to
    check, are treated as PREFIXED. The handle is left at byte 0.
    """
    try:
        head = handle.read(2 * PREFIX_SIZE)
        if len(head) < 2 * PREFIX_SIZE:
            return Framing.PREFIXED
        if head[:PREFIX_SIZE] != head[PREFIX_SIZE:]:
            return Framing.DOCUMENT
        (length,) = _LENGTH.unpack(head[:PREFIX_SIZE])
        if length > max_record_size:
            return Framing.PREFIXED
        handle.seek(PREFIX_SIZE)
        try:
            bson.decode(handle.read(length))
        except BSONError:
            return Framing.DOCUMENT
        return Framing.PREFIXED
    finally:
        handle.seek(0)


class BsonFileIterator:
    """Iterator (reader) over the records of a BSON dump file.

    ``current`` holds the decoded record and ``position`` its 0-based index;
    both are set by ``restart()`` and ``advance()``. Iterating with ``for``
    restarts on the first step and advances afterwards. The iterator owns
    its file handle; use it as a context manager or call ``close()``.

    Modifying the file while it is being read has undefined results.
    """

    def __init__(
        self,
        file: Union[str, os.PathLike],
        mode: Union[DecodeMode, int] = DecodeMode.RAW_JSON,
        max_record_size: int = DEFAULT_MAX_RECORD_SIZE,
        json_depth_limit: int = DEFAULT_JSON_DEPTH_LIMIT,
        json_options: int = DEFAULT_JSON_OPTIONS,
        framing: Union[Framing, str] = Framing.AUTO,
    ):
        self._handle: Optional[BinaryIO] = None
        self._current: Any = EXHAUSTED
        self._position = 0
        self._produced = 0
        self._started = False
        self._fresh = False

        path = os.fsdecode(os.fspath(file))
        _check_regular_file(path)
        if not os.access(path, os.R_OK):
            raise NotReadableError(path)
        try:
            handle = open(path, "rb")
        except OSError as e:
            raise OpenFailedError(path, e.strerror or str(e)) from e

        try:
            self._decoder = make_decoder(mode, json_depth_limit, json_options)
            if max_record_size < 1:
                raise InvalidMaxRecordSizeError(max_record_size)
            framing = Framing(framing)
            file_size = os.fstat(handle.fileno()).st_size
            if framing is Framing.AUTO:
                framing = detect_framing(handle, min(max_record_size, file_size))
        except BaseException:
            handle.close()
            raise

        self._handle = handle
        self._path = path
        self._framing = framing
        self._max_record_size = min(max_record_size, file_size)
        if self._max_record_size < max_record_size:
            logger.debug(f"Max. record size {max_record_size} clamped to file size {file_size} for {path}")
        logger.debug(
            f"Opened {path} ({file_size} bytes, {framing.value} framing, mode {self._decoder.mode.name}, "
            f"max. record size {self._max_record_size})"
        )

    @classmethod
    def from_settings(cls, file: Union[str, os.PathLike], settings: ReaderSettings) -> "BsonFileIterator":
        return cls(
            file,
            mode=settings.mode,
            max_record_size=settings.max_record_size,
            json_depth_limit=settings.json_depth_limit,
            json_options=settings.json_options,
            framing=settings.framing,
        )

    # ------------------------------------------------------------------
    # read-only views
    # ------------------------------------------------------------------

    @property
    def path(self) -> str:
        return self._path

    @property
    def mode(self) -> DecodeMode:
        return self._decoder.mode

    @property
    def framing(self) -> Framing:
        return self._framing

    @property
    def max_record_size(self) -> int:
        """Effective limit in bytes, never bigger than the file."""
        return self._max_record_size

    @property
    def current(self) -> Any:
        """The decoded record, or ``EXHAUSTED``."""
        return self._current

    @property
    def position(self) -> int:
        """0-based index of ``current``.

        Always the position of the record in the file, never derived from
        its content. Once exhausted, the number of records read.
        """
        return self._position

    @property
    def valid(self) -> bool:
        return self._current is not EXHAUSTED

    @property
    def closed(self) -> bool:
        return self._handle is None

    # ------------------------------------------------------------------
    # cursor
    # ------------------------------------------------------------------

    def restart(self) -> None:
        """Seek to byte 0 and load the first record (if any)."""
        handle = self._require_open()
        logger.debug(f"Restarting {self._path}")
        handle.seek(0)
        self._produced = 0
        self._position = 0
        self._started = True
        self.advance()

    def advance(self) -> None:
        """Load the next record into ``current``.

        :raises RecordTooLargeError: the length prefix exceeds ``max_record_size``
        :raises InvalidRecordBsonError: the payload is not a BSON document
        :raises InvalidRecordJsonError: the record JSON could not be parsed
        """
        handle = self._require_open()
        prefix = handle.read(PREFIX_SIZE)
        if len(prefix) < PREFIX_SIZE:
            self._current = EXHAUSTED
            self._position = self._produced
            self._fresh = False
            logger.debug(f"Reached end of {self._path} after {self._produced} records")
            return

        (length,) = _LENGTH.unpack(prefix)
        index = self._produced + 1
        if length > self._max_record_size:
            raise RecordTooLargeError(index, length, self._max_record_size)

        if self._framing is Framing.DOCUMENT:
            payload = prefix + handle.read(max(length - PREFIX_SIZE, 0))
        else:
            payload = handle.read(length)

        self._current = self._decoder(index, payload)
        self._position = self._produced
        self._produced += 1
        self._fresh = True

    def __iter__(self) -> "BsonFileIterator":
        return self

    def __next__(self) -> Any:
        if not self._started:
            self.restart()
        elif not self._fresh and self.valid:
            self.advance()
        if not self.valid:
            raise StopIteration
        self._fresh = False
        return self._current

    def items(self) -> Iterator[Tuple[int, Any]]:
        """Yield ``(position, record)`` pairs."""
        for record in self:
            yield self._position, record

    # ------------------------------------------------------------------
    # resource handling
    # ------------------------------------------------------------------

    def _require_open(self) -> BinaryIO:
        if self._handle is None:
            raise ValueError(f"I/O operation on closed BSON file {self._path!r}.")
        return self._handle

    def close(self) -> None:
        """Release the file handle (best effort, never raises)."""
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as e:
            logger.debug(f"Ignoring error while closing {self._path}: {e}")

    def __enter__(self) -> "BsonFileIterator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __del__(self):
        if getattr(self, "_handle", None) is not None:
            self.close()

    def __repr__(self):
        state = "closed" if self.closed else f"position={self._position}"
        return f"<BsonFileIterator {self._path!r} {self.mode.name} {state}>"


def iter_bson_file(file: Union[str, os.PathLike], **options) -> Iterator[Any]:
    """Yield decoded records without loading the whole file.

    Keyword arguments are passed to ``BsonFileIterator``. The file is closed
    when the generator finishes or is closed.
    """
    with BsonFileIterator(file, **options) as records:
        yield from records
