"""Pydantic models for the mock transaction with strict validation.

Field names and scalar encodings follow the CKB JSON-RPC types:
- H256: "0x" + 64 hex digits
- JsonBytes: "0x" + an even number of hex digits
- Uint32/Uint64/Uint128: "0x"-prefixed hex without leading zeros
"""

from pathlib import Path
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints, ValidationError

from mocktx.errors import SchemaError


def _bounded(bits: int):
    def check(v: str) -> str:
        if int(v, 16) >= 1 << bits:
            raise ValueError(f"Value {v} does not fit in {bits} bits")
        return v
    return check


_UINT_PATTERN = r"^0x(0|[1-9a-fA-F][0-9a-fA-F]*)$"

H256 = Annotated[str, StringConstraints(pattern=r"^0x[0-9a-fA-F]{64}$")]
JsonBytes = Annotated[str, StringConstraints(pattern=r"^0x([0-9a-fA-F]{2})*$")]
Uint32 = Annotated[str, StringConstraints(pattern=_UINT_PATTERN), AfterValidator(_bounded(32))]
Uint64 = Annotated[str, StringConstraints(pattern=_UINT_PATTERN), AfterValidator(_bounded(64))]
Uint128 = Annotated[str, StringConstraints(pattern=_UINT_PATTERN), AfterValidator(_bounded(128))]

ScriptHashType = Literal["data", "type", "data1", "data2"]
DepType = Literal["code", "dep_group"]


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Script(_Strict):
    code_hash: H256
    hash_type: ScriptHashType
    args: JsonBytes


class OutPoint(_Strict):
    tx_hash: H256
    index: Uint32


class CellDep(_Strict):
    out_point: OutPoint
    dep_type: DepType


class CellInput(_Strict):
    since: Uint64
    previous_output: OutPoint


class CellOutput(_Strict):
    capacity: Uint64
    lock: Script
    type: Optional[Script] = None


class HeaderView(_Strict):
    """A block header plus its hash."""
    compact_target: Uint32
    dao: H256
    epoch: Uint64
    extra_hash: H256
    hash: H256
    nonce: Uint128
    number: Uint64
    parent_hash: H256
    proposals_hash: H256
    timestamp: Uint64
    transactions_root: H256
    version: Uint32


class Transaction(_Strict):
    """The on-chain transaction body."""
    version: Uint32
    cell_deps: List[CellDep]
    header_deps: List[H256]
    inputs: List[CellInput]
    outputs: List[CellOutput]
    outputs_data: List[JsonBytes]
    witnesses: List[JsonBytes]


class MockCellDep(_Strict):
    """A cell dependency plus the cell content it points at."""
    cell_dep: CellDep
    output: CellOutput
    data: JsonBytes
    header: Optional[H256] = None


class MockInput(_Strict):
    """A transaction input plus the cell content it consumes."""
    input: CellInput
    output: CellOutput
    data: JsonBytes
    header: Optional[H256] = None


class MockInfo(_Strict):
    """Mock-only metadata the execution harness needs to resolve the transaction."""
    inputs: List[MockInput]
    cell_deps: List[MockCellDep]
    header_deps: List[HeaderView]
    extensions: List[Tuple[H256, JsonBytes]] = Field(default_factory=list)


class ReprMockTransaction(_Strict):
    """A transaction plus mock info, ready for a VM execution harness."""
    mock_info: MockInfo
    tx: Transaction

    def to_json(self) -> str:
        """Pretty-printed JSON, as consumed by `ckb-debugger --tx-file`."""
        return self.model_dump_json(indent=2)


def parse_mock_tx(text: str, path: Optional[Union[str, Path]] = None) -> ReprMockTransaction:
    """
    Deserialize fully resolved template text.

    Args:
        text: Resolved template text (no embedding markers left)
        path: Template path, for error messages only

    Returns:
        ReprMockTransaction

    Raises:
        SchemaError: If the text is not valid JSON or does not match the schema
    """
    try:
        return ReprMockTransaction.model_validate_json(text)
    except ValidationError as e:
        if any(err.get("type") == "json_invalid" for err in e.errors()):
            raise SchemaError(f"Resolved template is not valid JSON: {e}", path) from e
        raise SchemaError(f"Resolved template does not match the mock transaction schema: {e}", path) from e
