"""Tests for the offline snapshot diff command."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from prompt_versions.cli import app

runner = CliRunner()


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_diff_json_output(tmp_path):
    old = _write(tmp_path, "old.json", {"model": "gpt-4", "note": "a"})
    new = _write(tmp_path, "new.json", {"snapshot": {"model": "gpt-4o", "note": "a"}, "metadata": {}})

    result = runner.invoke(app, ["diff", str(old), str(new), "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "changes": [{"field": "model", "type": "modified", "oldValue": "gpt-4", "newValue": "gpt-4o"}],
    }


def test_diff_field_filter(tmp_path):
    old = _write(tmp_path, "old.json", {"model": "a", "seed": "1"})
    new = _write(tmp_path, "new.json", {"model": "b", "seed": "2"})

    result = runner.invoke(app, ["diff", str(old), str(new), "--json", "-f", "seed"])

    assert [c["field"] for c in json.loads(result.stdout)["changes"]] == ["seed"]


def test_diff_renders_text_changes(tmp_path):
    old = _write(tmp_path, "old.json", {"input_admin_prompt": "keep\ndrop"})
    new = _write(tmp_path, "new.json", {"input_admin_prompt": "keep\nadd"})

    result = runner.invoke(app, ["diff", str(old), str(new)])

    assert result.exit_code == 0
    assert "- drop" in result.stdout
    assert "+ add" in result.stdout


def test_diff_identical_snapshots(tmp_path):
    old = _write(tmp_path, "old.json", {"model": "a"})

    result = runner.invoke(app, ["diff", str(old), str(old)])

    assert result.exit_code == 0
    assert "No changes" in result.stdout


def test_diff_rejects_non_object_snapshot(tmp_path):
    old = _write(tmp_path, "old.json", ["not", "an", "object"])

    result = runner.invoke(app, ["diff", str(old), str(old)])

    assert result.exit_code == 1
