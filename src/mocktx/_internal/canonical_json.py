"""Centralized JSON serialization for template text.

Two renderings are used everywhere:
- pretty_dumps: the author-facing layout written between pipeline stages
  and printed by the CLI.
- canonical_dumps: byte-stable form used for fingerprints.
"""

import json
from typing import Any


def pretty_dumps(obj: Any) -> str:
    """
    Pretty JSON serialization for template text.

    Rules:
    - 2-space indentation
    - Key order preserved (authors' ordering is kept)
    - Non-ASCII preserved (embedding markers and paths stay readable)

    Args:
        obj: Python object to serialize

    Returns:
        Pretty JSON string
    """
    return json.dumps(obj, indent=2, ensure_ascii=False)


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization for byte-stable fingerprints.

    Rules:
    - UTF-8 encoding
    - Sorted keys
    - Stable separators (",", ":")
    - No trailing whitespace

    Args:
        obj: Python object to serialize

    Returns:
        Canonical JSON string (UTF-8 encoded)
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False  # UTF-8 encoding
    )
