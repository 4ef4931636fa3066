#!/usr/bin/env python3
"""Streaming reader for BSON dump files."""
from bson_lite.config import ReaderSettings
from bson_lite.decoders import DecodeMode, Document, JsonOption, bson_to_json, parse_json
from bson_lite.errors import (
    BsonFileError,
    InvalidDecodeModeError,
    InvalidDepthLimitError,
    InvalidMaxRecordSizeError,
    InvalidRecordBsonError,
    InvalidRecordJsonError,
    NotAFileError,
    NotReadableError,
    OpenFailedError,
    RecordError,
    RecordTooLargeError,
)
from bson_lite.file_iterator import EXHAUSTED, BsonFileIterator, Framing, detect_framing, iter_bson_file

__version__ = "0.1.0"

__all__ = [
    "BsonFileIterator",
    "BsonFileError",
    "DecodeMode",
    "Document",
    "EXHAUSTED",
    "Framing",
    "InvalidDecodeModeError",
    "InvalidDepthLimitError",
    "InvalidMaxRecordSizeError",
    "InvalidRecordBsonError",
    "InvalidRecordJsonError",
    "JsonOption",
    "NotAFileError",
    "NotReadableError",
    "OpenFailedError",
    "ReaderSettings",
    "RecordError",
    "RecordTooLargeError",
    "bson_to_json",
    "detect_framing",
    "iter_bson_file",
    "parse_json",
]
