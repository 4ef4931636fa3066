#!/usr/bin/env python3
"""Record decoding: BSON payload -> JSON text -> optional parsed value.

The BSON step is delegated to PyMongo's ``bson`` package and the JSON step
to ``ijson`` events fed into an ``ObjectBuilder``, so nesting depth can be
checked while the value is being built instead of afterwards.
"""
import enum
import io
import types
from typing import Any, Callable, Optional

import bson
import ijson
from bson import json_util
from bson.errors import InvalidBSON
from ijson.common import ObjectBuilder

from bson_lite.errors import (
    InvalidDecodeModeError,
    InvalidDepthLimitError,
    InvalidRecordBsonError,
    InvalidRecordJsonError,
)

# The pure-Python backend keeps integers of any size; yajl2_c overflows at int64
_JSON_BACKEND = ijson.get_backend("python")

DEPTH_EXCEEDED = "Maximum stack depth exceeded"
NULL_DOCUMENT = "Syntax error, null document"

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


class DecodeMode(enum.IntEnum):
    """Output representation of each record."""

    RAW_JSON = 1
    PARSED_MAPPING = 2
    PARSED_STRUCTURED = 3


class JsonOption(enum.IntFlag):
    """Flags for ``parse_json``; unknown bits are ignored."""

    NONE = 0
    BIGINT_AS_STRING = 2
    FLOAT_AS_DECIMAL = 4


class JsonParseError(ValueError):
    """Raised by ``parse_json``; the message is the parser's own error text."""


class Document(types.SimpleNamespace):
    """Attribute-access record built from a JSON object.

    Keys that are not valid identifiers (``$oid``, ``""``) are still stored
    as attributes and can be read back with ``getattr`` or ``vars()``. Item
    access goes through the instance dict only, so ``__class__`` is just a key.
    """

    def __setitem__(self, key, value):
        vars(self)[key] = value

    def __getitem__(self, key):
        return vars(self)[key]


def bson_to_json(payload: bytes) -> str:
    """Decode one BSON document into relaxed Extended JSON text."""
    document = bson.decode(payload)
    return json_util.dumps(document, json_options=json_util.RELAXED_JSON_OPTIONS)


def parse_json(text: str, depth_limit: int, options: int = 0,
               map_type: Optional[Callable[[], Any]] = None) -> Any:
    """Parse JSON text, failing as soon as nesting goes past ``depth_limit``.

    A top-level object or array is at depth 1.
    """
    flags = JsonOption(options)
    builder = ObjectBuilder(map_type=map_type)
    depth = 0
    events = _JSON_BACKEND.basic_parse(
        io.BytesIO(text.encode("utf-8")),
        use_float=not flags & JsonOption.FLOAT_AS_DECIMAL,
    )
    try:
        for event, value in events:
            if event in ("start_map", "start_array"):
                depth += 1
                if depth > depth_limit:
                    raise JsonParseError(DEPTH_EXCEEDED)
            elif event in ("end_map", "end_array"):
                depth -= 1
            elif event in ("number", "integer") and flags & JsonOption.BIGINT_AS_STRING:
                if isinstance(value, int) and not _INT64_MIN <= value <= _INT64_MAX:
                    value = str(value)
            builder.event(event, value)
    except ijson.JSONError as e:
        raise JsonParseError(str(e)) from e
    return builder.value


# ============================================================================
# Decode strategies
# ============================================================================

class JsonTextDecoder:
    """RAW_JSON: return the JSON text produced by the BSON primitive."""

    mode = DecodeMode.RAW_JSON

    def __call__(self, index: int, payload: bytes) -> Any:
        return self.to_json(index, payload)

    @staticmethod
    def to_json(index: int, payload: bytes) -> str:
        try:
            return bson_to_json(payload)
        except InvalidBSON as e:
            raise InvalidRecordBsonError(index, str(e)) from e


class MappingDecoder(JsonTextDecoder):
    """PARSED_MAPPING: JSON objects become ``dict`` with key order kept."""

    mode = DecodeMode.PARSED_MAPPING
    map_type: Callable[[], Any] = dict

    def __init__(self, depth_limit: int, options: int = 0):
        self.depth_limit = depth_limit
        self.options = options

    def __call__(self, index: int, payload: bytes) -> Any:
        text = self.to_json(index, payload)
        try:
            value = parse_json(text, self.depth_limit, self.options, self.map_type)
        except JsonParseError as e:
            raise InvalidRecordJsonError(index, str(e)) from e
        if value is None:
            raise InvalidRecordJsonError(index, NULL_DOCUMENT)
        return value


class StructuredDecoder(MappingDecoder):
    """PARSED_STRUCTURED: JSON objects become ``Document`` records."""

    mode = DecodeMode.PARSED_STRUCTURED
    map_type = Document


def make_decoder(mode, depth_limit: int, options: int = 0) -> JsonTextDecoder:
    """Validate the mode (and depth limit for parsed modes) and pick a strategy."""
    try:
        mode = DecodeMode(mode)
    except ValueError:
        raise InvalidDecodeModeError(mode, DecodeMode) from None

    if mode is DecodeMode.RAW_JSON:
        return JsonTextDecoder()

    if depth_limit < 1:
        raise InvalidDepthLimitError(depth_limit)

    if mode is DecodeMode.PARSED_MAPPING:
        return MappingDecoder(depth_limit, options)
    return StructuredDecoder(depth_limit, options)
