"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed mocktx package.
"""

import json
from pathlib import Path

import pytest


FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


def h256(n: int) -> str:
    """A recognizable H256 for test data."""
    return "0x" + f"{n:064x}"


def out_point(n: int, index: int = 0) -> dict:
    return {"tx_hash": h256(n), "index": hex(index)}


def cell_dep(n: int, index: int = 0) -> dict:
    return {"out_point": out_point(n, index), "dep_type": "code"}


def cell_input(n: int, index: int = 0) -> dict:
    return {"since": "0x0", "previous_output": out_point(n, index)}


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def write_template(tmp_path):
    """Write a template (dict or raw text) under tmp_path and return its path."""
    def _write(template, name: str = "tx.json") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        text = template if isinstance(template, str) else json.dumps(template, indent=2)
        path.write_text(text, encoding="utf-8")
        return path
    return _write
