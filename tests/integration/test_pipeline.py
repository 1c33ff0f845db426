"""Integration tests for the full pipeline and the command line entry point."""

import json

import pytest

from screenspec.contracts import RawDocument, Violation
from screenspec.errors import DuplicateActionId, SectionNotFound, UnresolvedActionReference
from screenspec.pipeline import generate_spec, transform
from screenspec.render_spec_md import render_spec_markdown
from screenspec.run_all import EXIT_ERROR, EXIT_OK, EXIT_VIOLATIONS, main
from screenspec.validate_output import validate


def _dates():
    return ["--created", "2024-01-10", "--updated", "2024-02-01"]


class TestGenerateSpec:
    """End-to-end tests for generate_spec."""

    def test_sample_passes_validation(self, raw_doc, spec_config):
        """Test that the sample yields a document with no violations."""
        result = transform(raw_doc, spec_config)

        assert result.ok
        assert [e.item_number for e in result.enriched] == ["1", "2", "3", "4"]
        assert result.enriched[2].referenced_action_ids == ("1",)
        assert result.enriched[3].referenced_action_ids == ("2",)

    def test_revalidation_is_clean(self, raw_doc, spec_config):
        """Test that validating a produced document again finds nothing."""
        doc = generate_spec(raw_doc, spec_config)

        assert validate(raw_doc, doc) == []

    def test_output_is_deterministic(self, raw_doc, spec_config):
        """Test that two runs on the same input render identical Markdown."""
        first = render_spec_markdown(generate_spec(raw_doc, spec_config))
        second = render_spec_markdown(generate_spec(raw_doc, spec_config))

        assert first == second

    def test_duplicate_action_id_stops_pipeline(self, sample_text, spec_config):
        """Test that a repeated action id fails before any output exists."""
        raw = RawDocument.from_text(sample_text.replace("| 2 | ヘルプリンク押下", "| 1 | ヘルプリンク押下"))

        with pytest.raises(DuplicateActionId):
            generate_spec(raw, spec_config)

    def test_unresolved_reference_stops_pipeline(self, sample_text, spec_config):
        """Test that a reference to a missing action fails the run."""
        text = sample_text.replace("アクションID 2を参照", "アクションID 9を参照").replace("action ID 2", "action ID 9")

        with pytest.raises(UnresolvedActionReference) as exc:
            generate_spec(RawDocument.from_text(text), spec_config)
        assert exc.value.action_id == "9"
        assert exc.value.item_number == "4"

    def test_missing_action_section(self, sample_text, spec_config):
        head = sample_text.split("## アクション / Action")[0]

        with pytest.raises(SectionNotFound) as exc:
            generate_spec(RawDocument.from_text(head), spec_config)
        assert exc.value.kind == "ActionTable"


class TestCommandLine:
    """Tests for the screenspec command."""

    @pytest.fixture
    def source(self, tmp_path, sample_text):
        path = tmp_path / "login.md"
        path.write_text(sample_text, encoding="utf-8")
        return path

    def test_successful_run(self, tmp_path, source, capsys):
        """Test that a clean run writes the spec, hashes and run metadata."""
        out = tmp_path / "out"

        code = main(["--input", str(source), "--out-dir", str(out), *_dates(), "--version", "1.2"])

        assert code == EXIT_OK
        spec = (out / "ABC_01_spec.md").read_text(encoding="utf-8")
        assert spec.startswith("# ABC_01 ログイン画面")
        meta = json.loads((out / "run_metadata.json").read_text(encoding="utf-8"))
        assert meta["success"] is True
        assert meta["groups"] == {"Main Components": 3, "Popups": 1}
        assert meta["error_codes"] == ["AUT-001", "HCK-001", "HCK-002"]
        hashes = json.loads((out / "artifact_hashes.json").read_text(encoding="utf-8"))
        assert set(hashes["sha256"]) == {"login.md", "ABC_01_spec.md"}
        assert "[OK] Wrote:" in capsys.readouterr().out

    def test_dump_intermediates(self, tmp_path, source):
        out = tmp_path / "out"

        code = main(["--input", str(source), "--out-dir", str(out), *_dates(), "--dump-intermediates", "--no-hashes"])

        assert code == EXIT_OK
        enriched = json.loads((out / "enriched_items.json").read_text(encoding="utf-8"))
        assert enriched[2]["stripped_sentences"] == ["アクションID 1を参照。", "Refer to action ID 1."]
        assert (out / "output_document.json").exists()
        assert not (out / "artifact_hashes.json").exists()

    def test_violations_block_output(self, tmp_path, source, monkeypatch):
        """Test that a run with violations writes metadata and removes any earlier spec."""
        monkeypatch.setattr(
            "screenspec.pipeline.validate",
            lambda raw, doc: [Violation(check="text-origin", token="x", message="text not found in source")],
        )
        out = tmp_path / "out"
        out.mkdir()
        (out / "ABC_01_spec.md").write_text("stale", encoding="utf-8")

        code = main(["--input", str(source), "--out-dir", str(out), *_dates()])

        assert code == EXIT_VIOLATIONS
        assert not (out / "ABC_01_spec.md").exists()
        meta = json.loads((out / "run_metadata.json").read_text(encoding="utf-8"))
        assert meta["success"] is False
        assert meta["violations"][0]["check"] == "text-origin"

    def test_structural_error_exit_code(self, tmp_path, sample_text, capsys):
        """Test that a missing section is reported and nothing is written."""
        path = tmp_path / "broken.md"
        path.write_text(sample_text.split("## アクション / Action")[0], encoding="utf-8")
        out = tmp_path / "out"

        code = main(["--input", str(path), "--out-dir", str(out), *_dates()])

        assert code == EXIT_ERROR
        assert "Required section not found" in capsys.readouterr().err
        assert not out.exists()

    def test_missing_dates_exit_code(self, source, tmp_path):
        assert main(["--input", str(source), "--out-dir", str(tmp_path / "out")]) == EXIT_ERROR
