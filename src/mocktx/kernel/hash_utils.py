"""Hash utilities for CKB scripts with explicit serialization rules.

This module provides the hashing and serialization functions the embedder
needs to derive script hashes. Output is stable across Python versions and
platforms because it only depends on hashlib and struct.

Key rules:
- Hash function is blake2b-256 personalized with b"ckb-default-hash"
- Scripts are serialized as molecule tables before hashing
- Hex strings are always "0x"-prefixed lowercase
"""

import hashlib
import struct
from pathlib import Path
from typing import Dict, List, Union


CKB_HASH_PERSONALIZATION = b"ckb-default-hash"

# Code hash of the built-in Type ID script ("TYPE_ID" right-aligned)
TYPE_ID_CODE_HASH = "0x00000000000000000000000000000000000000000000000000545950455f4944"

HASH_TYPES: Dict[str, int] = {
    "data": 0,
    "type": 1,
    "data1": 2,
    "data2": 4,
}


class ScriptEncodingError(ValueError):
    """Raised when a script cannot be serialized."""
    pass


def ckb_blake2b_256(data: Union[str, bytes]) -> bytes:
    """Compute the CKB default hash of data.

    Args:
        data: Content as string (UTF-8 encoded) or bytes

    Returns:
        32-byte digest
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.blake2b(data, digest_size=32, person=CKB_HASH_PERSONALIZATION).digest()


def hash_file(path: Union[str, Path]) -> str:
    """Compute the CKB default hash of a file's bytes as a 0x-prefixed hex string."""
    return to_hex(ckb_blake2b_256(Path(path).read_bytes()))


def to_hex(data: bytes) -> str:
    """Encode bytes as a 0x-prefixed lowercase hex string."""
    return "0x" + data.hex()


def from_hex(value: str) -> bytes:
    """Decode a 0x-prefixed hex string.

    Raises:
        ScriptEncodingError: If the prefix is missing or the digits are invalid
    """
    if not value.startswith("0x"):
        raise ScriptEncodingError(f"Hex string must start with '0x': {value!r}")
    try:
        return bytes.fromhex(value[2:])
    except ValueError as e:
        raise ScriptEncodingError(f"Invalid hex string {value!r}: {e}")


def _molecule_fixvec(item: bytes) -> bytes:
    """Serialize a byte vector (molecule `Bytes`): u32 LE length, then bytes."""
    return struct.pack("<I", len(item)) + item


def _molecule_table(fields: List[bytes]) -> bytes:
    """Serialize a molecule table: total size, field offsets, then field bodies."""
    header_size = 4 * (1 + len(fields))
    offsets = []
    offset = header_size
    for field in fields:
        offsets.append(offset)
        offset += len(field)
    header = struct.pack("<I", offset) + b"".join(struct.pack("<I", o) for o in offsets)
    return header + b"".join(fields)


def serialize_script(code_hash: str, hash_type: str, args: str) -> bytes:
    """Serialize a script to its molecule encoding.

    Args:
        code_hash: 0x-prefixed 32-byte hex string
        hash_type: One of "data", "type", "data1", "data2"
        args: 0x-prefixed hex string

    Returns:
        Molecule bytes of the `Script` table

    Raises:
        ScriptEncodingError: If any field is malformed
    """
    code_hash_bytes = from_hex(code_hash)
    if len(code_hash_bytes) != 32:
        raise ScriptEncodingError(
            f"code_hash must be 32 bytes, got {len(code_hash_bytes)}"
        )
    if hash_type not in HASH_TYPES:
        raise ScriptEncodingError(
            f"Unknown hash_type {hash_type!r}. Expected one of {sorted(HASH_TYPES)}"
        )
    return _molecule_table([
        code_hash_bytes,
        bytes([HASH_TYPES[hash_type]]),
        _molecule_fixvec(from_hex(args)),
    ])


def script_hash(code_hash: str, hash_type: str, args: str) -> str:
    """Compute the script hash (CKB hash of the molecule-encoded script).

    Returns:
        0x-prefixed hex string
    """
    return to_hex(ckb_blake2b_256(serialize_script(code_hash, hash_type, args)))


def type_id_script(name: str) -> Dict[str, str]:
    """Build the JSON form of a Type ID script whose args are the UTF-8 name.

    Key order matches the JSON-RPC rendering of a script.
    """
    return {
        "code_hash": TYPE_ID_CODE_HASH,
        "hash_type": "type",
        "args": to_hex(name.encode("utf-8")),
    }


def type_id_script_hash(name: str) -> str:
    """Compute the script hash of the Type ID script defined for a name."""
    script = type_id_script(name)
    return script_hash(script["code_hash"], script["hash_type"], script["args"])
