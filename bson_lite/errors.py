#!/usr/bin/env python3
"""Exceptions raised while opening and reading BSON dump files."""


class BsonFileError(Exception):
    """Base class for every error raised by bson_lite."""


# ============================================================================
# Construction errors
# ============================================================================

class NotAFileError(BsonFileError, ValueError):
    """The path is missing, a directory, or some other non-regular file."""

    def __init__(self, path: str, reason: str = "missing"):
        self.path = path
        self.reason = reason
        if reason == "missing":
            label = f'"{path}"'
        else:
            label = f'{reason}#"{path}"'
        super().__init__(f"{label} is not a file.")


class NotReadableError(BsonFileError, ValueError):
    """The path is a regular file without read permission."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'file "{path}" is not readable.')


class OpenFailedError(BsonFileError, OSError):
    """Opening the file failed although it looked readable."""

    def __init__(self, path: str, detail: str = ""):
        self.path = path
        self.detail = detail
        message = f'Failed to open file "{path}" for reading.'
        if detail:
            message += f" {detail}"
        super().__init__(message)


class InvalidDecodeModeError(BsonFileError, ValueError):
    def __init__(self, value, valid):
        self.value = value
        self.valid = tuple(valid)
        choices = ", ".join(str(int(v)) for v in self.valid)
        super().__init__(f'Construct type must be any of integers "{choices}" got "{value}".')


class InvalidDepthLimitError(BsonFileError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f'Expected integer > 0 for JSON decode max depth, got "{value}".')


class InvalidMaxRecordSizeError(BsonFileError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f'Expected integer > 0 for max. unpack size, got "{value}".')


# ============================================================================
# Iteration errors
# ============================================================================

class RecordError(BsonFileError, ValueError):
    """A record could not be produced. `index` is 1-based."""

    def __init__(self, message: str, index: int):
        self.index = index
        super().__init__(message)


class RecordTooLargeError(RecordError):
    """The length prefix of a record exceeds the effective max. record size."""

    def __init__(self, index: int, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"Invalid data at item #{index}, size {size} exceeds max. unpack size {max_size}.",
            index,
        )


class InvalidRecordJsonError(RecordError):
    """The JSON text of a record could not be parsed into a value."""

    def __init__(self, index: int, parser_error: str):
        self.parser_error = parser_error
        super().__init__(f'Invalid JSON "{parser_error}" at item #{index}.', index)


class InvalidRecordBsonError(RecordError):
    """The BSON payload of a record was rejected by the decoder."""

    def __init__(self, index: int, decoder_error: str):
        self.decoder_error = decoder_error
        super().__init__(f'Invalid BSON "{decoder_error}" at item #{index}.', index)
