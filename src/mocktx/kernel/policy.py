"""Completion policy: the versioned table of fields the auto-completer fills in.

The policy is pure data. A shape lists the fields recognized on one kind of
JSON object; each field rule says what to insert when the field is absent
and which shape applies to its value (or to each element, for arrays).
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from mocktx._internal.canonical_json import canonical_dumps
from mocktx.kernel.hash_utils import ckb_blake2b_256, to_hex


ZERO_HASH = "0x" + "00" * 32


class FieldRule(BaseModel):
    """How one field of a shape is completed.

    - default: JSON value inserted when the field is absent
    - shape: nested shape applied to an object value
    - items: nested shape applied to each element of an array value
    - generate: synthesize the value instead of copying ``default``
      ("out_point" derives a unique, deterministic out point from the
      owning array path and the element position)
    - align_with / fill: when absent, insert an array holding one ``fill``
      per element of the sibling array ``align_with``
    """
    name: str
    default: Any = None
    shape: Optional[str] = None
    items: Optional[str] = None
    generate: Optional[Literal["out_point"]] = None
    align_with: Optional[str] = None
    fill: Any = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_rule(self) -> "FieldRule":
        if self.shape is not None and self.items is not None:
            raise ValueError(f"Field '{self.name}' cannot set both 'shape' and 'items'")
        if self.align_with is not None and self.fill is None:
            raise ValueError(f"Field '{self.name}' sets 'align_with' without 'fill'")
        return self


class Shape(BaseModel):
    """The recognized fields of one kind of JSON object."""
    fields: List[FieldRule]

    model_config = ConfigDict(extra="forbid", frozen=True)

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


class CompletionPolicy(BaseModel):
    """A complete, versioned completion policy."""
    policy_version: str
    root: str
    shapes: Dict[str, Shape]

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_references(self) -> "CompletionPolicy":
        """Every shape reference must resolve and field names must be unique per shape."""
        if self.root not in self.shapes:
            raise ValueError(f"Root shape '{self.root}' is not defined")

        for shape_name, shape in self.shapes.items():
            names = shape.field_names()
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise ValueError(f"Shape '{shape_name}' has duplicate fields: {duplicates}")
            for rule in shape.fields:
                for ref in (rule.shape, rule.items):
                    if ref is not None and ref not in self.shapes:
                        raise ValueError(
                            f"Field '{shape_name}.{rule.name}' references unknown shape '{ref}'"
                        )
                if rule.align_with is not None and rule.align_with not in names:
                    raise ValueError(
                        f"Field '{shape_name}.{rule.name}' aligns with unknown field '{rule.align_with}'"
                    )
        return self

    def fingerprint(self) -> str:
        """Stable hash of the policy content, for logs and reports."""
        payload = {
            "policy_version": self.policy_version,
            "root": self.root,
            "shapes": {name: shape.model_dump() for name, shape in self.shapes.items()},
        }
        return to_hex(ckb_blake2b_256(canonical_dumps(payload)))


DEFAULT_POLICY_DATA: Dict[str, Any] = {
    "policy_version": "1",
    "root": "mock_tx",
    "shapes": {
        "mock_tx": {"fields": [
            {"name": "mock_info", "default": {}, "shape": "mock_info"},
            {"name": "tx", "default": {}, "shape": "transaction"},
        ]},
        "mock_info": {"fields": [
            {"name": "inputs", "default": [], "items": "mock_input"},
            {"name": "cell_deps", "default": [], "items": "mock_cell_dep"},
            {"name": "header_deps", "default": []},
            {"name": "extensions", "default": []},
        ]},
        "mock_cell_dep": {"fields": [
            {"name": "cell_dep", "default": {}, "shape": "cell_dep"},
            {"name": "output", "default": {}, "shape": "cell_output"},
            {"name": "data", "default": "0x"},
            {"name": "header", "default": None},
        ]},
        "mock_input": {"fields": [
            {"name": "input", "default": {}, "shape": "cell_input"},
            {"name": "output", "default": {}, "shape": "cell_output"},
            {"name": "data", "default": "0x"},
            {"name": "header", "default": None},
        ]},
        "cell_dep": {"fields": [
            {"name": "out_point", "generate": "out_point"},
            {"name": "dep_type", "default": "code"},
        ]},
        "cell_input": {"fields": [
            {"name": "since", "default": "0x0"},
            {"name": "previous_output", "generate": "out_point"},
        ]},
        "cell_output": {"fields": [
            {"name": "capacity", "default": "0x0"},
            {"name": "lock", "default": {}, "shape": "script"},
            {"name": "type", "default": None, "shape": "script"},
        ]},
        "script": {"fields": [
            {"name": "code_hash", "default": ZERO_HASH},
            {"name": "hash_type", "default": "data"},
            {"name": "args", "default": "0x"},
        ]},
        "transaction": {"fields": [
            {"name": "version", "default": "0x0"},
            {"name": "cell_deps", "default": []},
            {"name": "header_deps", "default": []},
            {"name": "inputs", "default": []},
            {"name": "outputs", "default": [], "items": "cell_output"},
            {"name": "outputs_data", "default": [], "align_with": "outputs", "fill": "0x"},
            {"name": "witnesses", "default": []},
        ]},
    },
}

DEFAULT_POLICY = CompletionPolicy.model_validate(DEFAULT_POLICY_DATA)
