"""Auto-completion of template text.

Rewrites a partial mock transaction template, inserting the defaults the
completion policy names for any recognized field that is absent.

Rules:
- A present field is never overwritten (an explicit null counts as present)
- Strings in object/array positions are opaque: they may be embedding
  markers that only the embedder understands
- Generated values depend only on their location, so completion is idempotent
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from mocktx._internal.canonical_json import pretty_dumps
from mocktx.errors import CompletionError
from mocktx.kernel.hash_utils import ckb_blake2b_256, to_hex
from mocktx.kernel.policy import DEFAULT_POLICY, CompletionPolicy, FieldRule


logger = logging.getLogger(__name__)

_TOO_DEEP = "Template is nested too deeply to analyze"


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _join(where: str, name: str) -> str:
    return f"{where}.{name}" if where else name


def generate_out_point(array_path: str, index: int) -> Dict[str, str]:
    """Derive a placeholder out point for the element at ``index`` of ``array_path``.

    The tx_hash is the CKB hash of the array path, so cells from different
    collections never share an out point.
    """
    return {
        "tx_hash": to_hex(ckb_blake2b_256(array_path)),
        "index": hex(index),
    }


class _Completer:
    """Walks a parsed template and applies one policy to it."""

    def __init__(self, policy: CompletionPolicy, path: Optional[Path]):
        self.policy = policy
        self.path = path
        self.inserted = 0

    def complete_object(
        self,
        obj: Dict[str, Any],
        shape_name: str,
        where: str,
        array_path: str,
        index: int,
    ) -> None:
        for rule in self.policy.shapes[shape_name].fields:
            location = _join(where, rule.name)
            if rule.name not in obj:
                obj[rule.name] = self._default_for(rule, obj, array_path, index)
                self.inserted += 1

            value = obj[rule.name]
            if rule.shape is not None:
                self._descend_object(value, rule.shape, location, array_path, index)
            elif rule.items is not None:
                self._descend_array(value, rule.items, location)

    def _default_for(self, rule: FieldRule, obj: Dict[str, Any], array_path: str, index: int) -> Any:
        if rule.generate == "out_point":
            return generate_out_point(array_path, index)
        if rule.align_with is not None:
            sibling = obj.get(rule.align_with)
            count = len(sibling) if isinstance(sibling, list) else 0
            return [copy.deepcopy(rule.fill) for _ in range(count)]
        return copy.deepcopy(rule.default)

    def _descend_object(self, value: Any, shape_name: str, where: str, array_path: str, index: int) -> None:
        if isinstance(value, dict):
            self.complete_object(value, shape_name, where, array_path, index)
        elif value is None or isinstance(value, str):
            return
        else:
            raise CompletionError(
                f"'{where}' must be an object, got {_json_type(value)}", self.path
            )

    def _descend_array(self, value: Any, shape_name: str, where: str) -> None:
        if value is None or isinstance(value, str):
            return
        if not isinstance(value, list):
            raise CompletionError(
                f"'{where}' must be an array, got {_json_type(value)}", self.path
            )
        for i, element in enumerate(value):
            element_where = f"{where}[{i}]"
            if isinstance(element, dict):
                self.complete_object(element, shape_name, element_where, where, i)
            elif not isinstance(element, str):
                raise CompletionError(
                    f"'{element_where}' must be an object, got {_json_type(element)}", self.path
                )


def complete_document(
    document: Any,
    policy: Optional[CompletionPolicy] = None,
    path: Optional[Union[str, Path]] = None,
) -> int:
    """Complete a parsed template in place.

    Args:
        document: Parsed template (must be a dict)
        policy: Completion policy (defaults to DEFAULT_POLICY)
        path: Template path, for error messages only

    Returns:
        Number of fields inserted

    Raises:
        CompletionError: If the document structure cannot be analyzed
    """
    policy = policy or DEFAULT_POLICY
    source = Path(path) if path is not None else None
    if not isinstance(document, dict):
        raise CompletionError(
            f"Template root must be an object, got {_json_type(document)}", source
        )
    completer = _Completer(policy, source)
    completer.complete_object(document, policy.root, "", "", 0)
    return completer.inserted


def auto_complete(
    text: str,
    policy: Optional[CompletionPolicy] = None,
    path: Optional[Union[str, Path]] = None,
) -> str:
    """
    Insert policy defaults for every absent recognized field of a template.

    Args:
        text: Raw template text
        policy: Completion policy (defaults to DEFAULT_POLICY)
        path: Template path, for error messages only

    Returns:
        Completed template text (pretty JSON)

    Raises:
        CompletionError: If the text is not valid JSON or its structure
                         prevents determining which fields are present
    """
    policy = policy or DEFAULT_POLICY
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise CompletionError(f"Template is not valid JSON: {e}", path) from e
    except RecursionError as e:
        raise CompletionError(_TOO_DEEP, path) from e

    try:
        inserted = complete_document(document, policy, path)
        completed = pretty_dumps(document)
    except RecursionError as e:
        raise CompletionError(_TOO_DEEP, path) from e

    logger.debug(
        "Completed template %s: %d field(s) inserted (policy v%s)",
        path or "<text>", inserted, policy.policy_version,
    )
    return completed
