"""End-to-end tests for the template pipeline through mocktx.api."""

import json

import pytest

from mocktx.api import (
    ResolutionResult,
    complete_template,
    read_tx_template,
    resolve_template,
    resolve_templates,
)
from mocktx.codes import ErrorKind, Stage
from mocktx.errors import CompletionError, EmbedError, PolicyError, SchemaError, TemplateIOError
from mocktx.kernel.hash_utils import to_hex, type_id_script_hash
from mocktx.kernel.mock_tx import CellDep, CellInput
from mocktx.kernel.policy import DEFAULT_POLICY_DATA

from conftest import cell_dep, cell_input


class TestScenarios:
    def test_backfill_from_mock_info(self, write_template):
        """Empty tx lists are derived from mock_info."""
        path = write_template({
            "tx": {"cell_deps": [], "inputs": []},
            "mock_info": {
                "cell_deps": [{"cell_dep": cell_dep(0xA)}],
                "inputs": [{"input": cell_input(0xB)}],
            },
        })
        mock_tx = read_tx_template(path)
        assert mock_tx.tx.cell_deps == [CellDep(**cell_dep(0xA))]
        assert mock_tx.tx.inputs == [CellInput(**cell_input(0xB))]

    def test_no_backfill_needed(self, write_template):
        """A tx that already lists a cell dep keeps it as-is."""
        path = write_template({
            "tx": {"cell_deps": [cell_dep(1)]},
            "mock_info": {"cell_deps": [{"cell_dep": cell_dep(2)}, {"cell_dep": cell_dep(3)}]},
        })
        mock_tx = read_tx_template(path)
        assert mock_tx.tx.cell_deps == [CellDep(**cell_dep(1))]

    def test_embedded_binaries(self, write_template, tmp_path):
        (tmp_path / "build").mkdir()
        (tmp_path / "build" / "lock").write_bytes(b"\x7fELF")
        (tmp_path / "build" / "main.js").write_text("main();", encoding="utf-8")
        path = write_template({
            "mock_info": {
                "cell_deps": [
                    {"data": "{{ data ../build/lock }}", "output": {"type": "{{ def_type lock }}"}},
                    {"data": "{{ data ../build/main.js }}"},
                ],
                "inputs": [{"output": {"lock": {"code_hash": "{{ ref_type lock }}", "hash_type": "type"}}}],
            },
        }, name="templates/tx.json")

        mock_tx = read_tx_template(path)

        deps = mock_tx.mock_info.cell_deps
        assert deps[0].data == "0x7f454c46"
        assert deps[1].data == to_hex(b"main();")
        assert deps[0].output.type.hash_type == "type"
        assert deps[0].output.type.args == to_hex(b"lock")
        assert mock_tx.mock_info.inputs[0].output.lock.code_hash == type_id_script_hash("lock")
        assert len(mock_tx.tx.cell_deps) == 2
        assert len(mock_tx.tx.inputs) == 1

    def test_fixture_template(self, fixtures_dir):
        template = fixtures_dir / "templates" / "module.json"
        vm_bytes = (fixtures_dir / "scripts" / "ckb-js-vm").read_bytes()

        mock_tx = read_tx_template(template)

        deps = mock_tx.mock_info.cell_deps
        assert [d.data for d in deps][0] == to_hex(vm_bytes)
        assert deps[1].cell_dep.out_point.index == "0x1"
        assert mock_tx.mock_info.inputs[0].output.lock.code_hash == type_id_script_hash("ckb-js-vm")
        assert mock_tx.tx.outputs_data == ["0x"]
        assert mock_tx.tx.witnesses == ["0x"]
        assert [d.out_point for d in mock_tx.tx.cell_deps] == [d.cell_dep.out_point for d in deps]
        assert "{{" not in mock_tx.to_json()


class TestFailFast:
    """Each stage's error surfaces unchanged, with no partial result."""

    def test_missing_template(self, tmp_path):
        with pytest.raises(TemplateIOError):
            read_tx_template(tmp_path / "nope.json")

    def test_malformed_template(self, write_template):
        with pytest.raises(CompletionError):
            read_tx_template(write_template('{"mock_info": '))

    def test_missing_embedded_file(self, write_template, tmp_path):
        path = write_template({"mock_info": {"cell_deps": [{"data": "{{ data missing.bin }}"}]}})
        with pytest.raises(EmbedError) as excinfo:
            read_tx_template(path)
        assert excinfo.value.path == tmp_path / "missing.bin"

    def test_schema_mismatch(self, write_template):
        path = write_template({"tx": {"version": 1}})
        with pytest.raises(SchemaError) as excinfo:
            read_tx_template(path)
        assert excinfo.value.path == path


class TestResolveTemplate:
    """The result-returning variant of the pipeline."""

    def test_ok(self, write_template):
        result = resolve_template(write_template({}))
        assert isinstance(result, ResolutionResult)
        assert result.ok is True
        assert result.error is None
        assert result.mock_tx.tx.version == "0x0"

    def test_missing_embedded_file(self, write_template, tmp_path):
        path = write_template({"mock_info": {"cell_deps": [
            {"data": "{{ data a.bin }}"},
            {"data": "{{ data b.bin }}"},
        ]}})
        result = resolve_template(path)
        assert result.ok is False
        assert result.mock_tx is None
        assert result.error.kind == ErrorKind.EMBED_ERROR
        assert result.error.stage == Stage.EMBED
        assert result.error.path == str(tmp_path / "a.bin")
        assert result.error.paths == [str(tmp_path / "a.bin"), str(tmp_path / "b.bin")]

    def test_io_error(self, tmp_path):
        result = resolve_template(tmp_path / "nope.json")
        assert result.ok is False
        assert result.error.kind == ErrorKind.IO_ERROR
        assert result.error.path == str(tmp_path / "nope.json")

    def test_result_serializes(self, write_template):
        result = resolve_template(write_template('[]'))
        dumped = json.loads(result.model_dump_json())
        assert dumped["error"]["kind"] == "COMPLETION_ERROR"
        assert dumped["error"]["stage"] == "complete"

    def test_deeply_nested_template(self, write_template):
        result = resolve_template(write_template('{"tx": ' + "[" * 100000))
        assert result.ok is False
        assert result.error.kind == ErrorKind.COMPLETION_ERROR


class TestResolveTemplates:
    def test_results_in_input_order(self, write_template):
        paths = [
            write_template({"tx": {"witnesses": [hex_witness]}}, name=f"t{i}.json")
            for i, hex_witness in enumerate(["0x01", "0x02", "0x03", "0x04"])
        ]
        paths.insert(2, write_template("{", name="bad.json"))

        results = resolve_templates(paths, max_workers=3)

        assert [r.template for r in results] == [str(p) for p in paths]
        assert [r.ok for r in results] == [True, True, False, True, True]
        assert [r.mock_tx.tx.witnesses for r in results if r.ok] == [["0x01"], ["0x02"], ["0x03"], ["0x04"]]

    def test_empty(self):
        assert resolve_templates([]) == []

    def test_deeply_nested_template_keeps_other_results(self, write_template):
        good = write_template({}, name="good.json")
        deep = write_template('{"tx": ' + "[" * 100000, name="deep.json")
        results = resolve_templates([good, deep])
        assert [r.ok for r in results] == [True, False]
        assert results[1].error.stage == Stage.COMPLETE


class TestPolicy:
    def test_policy_path(self, write_template, tmp_path):
        data = json.loads(json.dumps(DEFAULT_POLICY_DATA))
        data["shapes"]["transaction"]["fields"][0]["default"] = "0x2"
        policy_path = tmp_path / "policy.json"
        policy_path.write_text(json.dumps(data), encoding="utf-8")

        mock_tx = read_tx_template(write_template({}), policy=policy_path)
        assert mock_tx.tx.version == "0x2"

    def test_bad_policy_path_reported(self, write_template, tmp_path):
        result = resolve_template(write_template({}), policy=tmp_path / "missing-policy.json")
        assert result.ok is False
        assert result.error.kind == ErrorKind.POLICY_ERROR
        assert result.error.stage == Stage.CONFIG

    def test_bad_policy_path_raises_for_batch(self, write_template, tmp_path):
        with pytest.raises(PolicyError):
            resolve_templates([write_template({})], policy=tmp_path / "missing-policy.json")

    def test_complete_template_keeps_markers(self, write_template):
        text = complete_template(write_template({"mock_info": {"cell_deps": [{"data": "{{ data x }}"}]}}))
        assert "{{ data x }}" in text
        assert json.loads(text)["mock_info"]["cell_deps"][0]["cell_dep"]["dep_type"] == "code"
