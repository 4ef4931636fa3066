#!/usr/bin/env python3
"""Generate BSON dump files for testing bson-lite components."""

import pathlib
import random
import string
import struct
from typing import Any, Dict, Iterable, List, Optional

import bson
from bson import ObjectId


def _write(data: bytes, output_path: Optional[str]) -> bytes:
    if output_path:
        pathlib.Path(output_path).write_bytes(data)
    return data


def encode_document_dump(documents: Iterable[Dict[str, Any]], output_path: Optional[str] = None) -> bytes:
    """
    Concatenate BSON documents the way mongodump does.

    Each document's own int32 length doubles as the record prefix.
    """
    return _write(b"".join(bson.encode(doc) for doc in documents), output_path)


def encode_prefixed_dump(documents: Iterable[Dict[str, Any]], output_path: Optional[str] = None) -> bytes:
    """
    Write every document behind an external 4-byte little-endian length.

    A record is `<L><L bytes of BSON>`, so it takes 4 + L bytes of the file.
    """
    chunks = []
    for doc in documents:
        payload = bson.encode(doc)
        chunks.append(struct.pack("<I", len(payload)) + payload)
    return _write(b"".join(chunks), output_path)


def index_documents() -> List[Dict[str, Any]]:
    """The single document found in a dumped `system.indexes` collection."""
    return [{"v": 1, "key": {"_id": 1}, "ns": "gecko.test", "name": "_id_"}]


def mixed_documents(count: int = 2) -> List[Dict[str, Any]]:
    """
    Documents covering the common BSON scalar types.

    Args:
        count: Number of documents, each with its own ObjectId
    """
    docs = []
    for i in range(count):
        docs.append({
            "a": 1,
            "b": None,
            "c": False,
            "d": [],
            "e": {},
            "f": "abc",
            "g": bson.Int64(2 ** 63 - 1),
            "h": -1.11111111,
            "i": bson.Int64(-(2 ** 63)),
            "j": 1.11111111,
            "k": 0,
            "l": [1, 2, 3],
            "_id": ObjectId("58359204eb70974bcd457c%02x" % (0xc1 + i)),
        })
    return docs


def sized_documents(records: int, min_len: int = 0, max_len: int = 500) -> List[Dict[str, Any]]:
    """
    Generate documents with random payload sizes.

    Args:
        records: Number of documents
        min_len: Minimum length of the padding string
        max_len: Maximum length of the padding string
    """
    return [
        {
            "id": i,
            "status": random.choice(["active", "inactive", "pending"]),
            "data": "".join(random.choices(string.ascii_letters, k=random.randint(min_len, max_len))),
        }
        for i in range(records)
    ]


def nested_document(depth: int) -> Dict[str, Any]:
    """A document whose objects nest `depth` levels deep (top level included)."""
    doc: Any = "value"
    for _ in range(depth - 1):
        doc = {"nested": doc}
    return {"root": doc}


def generate_corrupted_dump(output_path: Optional[str] = None) -> bytes:
    """
    A 372-byte file whose first length prefix reads as 12435439.
    """
    data = struct.pack("<I", 12435439) + bytes(random.getrandbits(8) for _ in range(368))
    return _write(data, output_path)


def generate_truncated_dump(documents: Iterable[Dict[str, Any]], missing: int,
                            output_path: Optional[str] = None) -> bytes:
    """
    A prefixed dump with the last `missing` bytes cut off.
    """
    data = encode_prefixed_dump(documents)
    return _write(data[:-missing], output_path)


def generate_large_dump(records: int, record_bytes: int, output_path: Optional[str] = None) -> bytes:
    """
    Generate a mongodump-style file of roughly `records * record_bytes` bytes.
    """
    filler = "x" * max(0, record_bytes - 40)
    docs = ({"id": i, "data": filler} for i in range(records))
    return encode_document_dump(docs, output_path)


if __name__ == "__main__":
    output_dir = pathlib.Path("test_data")
    output_dir.mkdir(exist_ok=True)

    print("Generating test data files...")
    encode_document_dump(index_documents(), str(output_dir / "system.indexes.bson"))
    encode_document_dump(mixed_documents(), str(output_dir / "test.bson"))
    generate_corrupted_dump(str(output_dir / "test.corrupt.bson"))
    (output_dir / "small.bson").write_bytes(b"aaaa")
    (output_dir / "empty.bson").write_bytes(b"")
    generate_large_dump(10000, 1024, str(output_dir / "large.bson"))
    print(f"Test data generated in {output_dir}")
