#!/usr/bin/env python3
"""Reader defaults and environment overrides."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MAX_RECORD_SIZE = 5 * 1024 * 1024
DEFAULT_JSON_DEPTH_LIMIT = 512
DEFAULT_JSON_OPTIONS = 0
DEFAULT_MODE = 1
DEFAULT_FRAMING = "auto"

ENV_PREFIX = "BSON_LITE_"


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class ReaderSettings:
    """Construction parameters for ``BsonFileIterator.from_settings``.

    Values are not range-checked here; the iterator constructor does that.
    """

    mode: int = DEFAULT_MODE
    max_record_size: int = DEFAULT_MAX_RECORD_SIZE
    json_depth_limit: int = DEFAULT_JSON_DEPTH_LIMIT
    json_options: int = DEFAULT_JSON_OPTIONS
    framing: str = DEFAULT_FRAMING

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReaderSettings":
        """Build settings from ``BSON_LITE_*`` variables, defaulting the rest."""
        if environ is None:
            environ = os.environ
        framing = environ.get(ENV_PREFIX + "FRAMING", "").strip().lower() or DEFAULT_FRAMING
        return cls(
            mode=_env_int(environ, "MODE", DEFAULT_MODE),
            max_record_size=_env_int(environ, "MAX_RECORD_SIZE", DEFAULT_MAX_RECORD_SIZE),
            json_depth_limit=_env_int(environ, "JSON_DEPTH", DEFAULT_JSON_DEPTH_LIMIT),
            json_options=_env_int(environ, "JSON_OPTIONS", DEFAULT_JSON_OPTIONS),
            framing=framing,
        )
