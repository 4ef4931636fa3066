#!/usr/bin/env python3
"""Shared pytest fixtures for bson-lite test suite."""

import pathlib
import sys
from typing import Any, Callable, Dict, List

import pytest

# Make the data generators importable without a package
sys.path.insert(0, str(pathlib.Path(__file__).parent / "fixtures"))

from generate_test_data import (  # noqa: E402
    encode_document_dump,
    encode_prefixed_dump,
    generate_corrupted_dump,
    index_documents,
    mixed_documents,
)


# ============================================================================
# File Fixtures
# ============================================================================

@pytest.fixture
def indexes_file(tmp_path) -> pathlib.Path:
    """A mongodump-style `system.indexes.bson` with one document."""
    path = tmp_path / "system.indexes.bson"
    encode_document_dump(index_documents(), str(path))
    return path


@pytest.fixture
def mixed_file(tmp_path) -> pathlib.Path:
    """A mongodump-style `test.bson` with two mixed-type documents."""
    path = tmp_path / "test.bson"
    encode_document_dump(mixed_documents(), str(path))
    return path


@pytest.fixture
def prefixed_indexes_file(tmp_path) -> pathlib.Path:
    """The indexes document behind an external length prefix."""
    path = tmp_path / "prefixed.indexes.bson"
    encode_prefixed_dump(index_documents(), str(path))
    return path


@pytest.fixture
def empty_file(tmp_path) -> pathlib.Path:
    path = tmp_path / "empty.bson"
    path.write_bytes(b"")
    return path


@pytest.fixture
def small_file(tmp_path) -> pathlib.Path:
    """Four bytes of text; the prefix reads as 1633771873."""
    path = tmp_path / "small.bson"
    path.write_bytes(b"aaaa")
    return path


@pytest.fixture
def corrupted_file(tmp_path) -> pathlib.Path:
    path = tmp_path / "test.corrupt.bson"
    generate_corrupted_dump(str(path))
    return path


@pytest.fixture
def dump_file(tmp_path) -> Callable[..., pathlib.Path]:
    """Factory writing documents to a dump file in either framing."""
    counter = iter(range(1000))

    def _make(documents: List[Dict[str, Any]], prefixed: bool = False) -> pathlib.Path:
        path = tmp_path / f"dump_{next(counter)}.bson"
        encoder = encode_prefixed_dump if prefixed else encode_document_dump
        encoder(documents, str(path))
        return path

    return _make


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture
def clean_environment(monkeypatch):
    """Ensure no BSON_LITE_* variable leaks into a test."""
    for var in ["BSON_LITE_MODE", "BSON_LITE_MAX_RECORD_SIZE", "BSON_LITE_JSON_DEPTH",
                "BSON_LITE_JSON_OPTIONS", "BSON_LITE_FRAMING"]:
        monkeypatch.delenv(var, raising=False)

    yield


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "benchmark: marks benchmark tests")
