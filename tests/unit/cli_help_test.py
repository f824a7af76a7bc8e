"""Tests for the CLI entry points."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from go_samples import A_GO, B_GO
from typer.testing import CliRunner

from isurus.cli.app import app

runner = CliRunner()


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["crud"],
        ["serve"],
        ["serve", "api"],
        ["serve", "mcp"],
    ],
    ids=["root", "crud", "serve", "serve-api", "serve-mcp"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_crud_prints_json_report(tmp_path: Path) -> None:
    (tmp_path / "a.go").write_text(A_GO, encoding="utf-8")
    (tmp_path / "b.go").write_text(B_GO, encoding="utf-8")

    result = runner.invoke(app, ["--log-level", "WARNING", "crud", str(tmp_path), "--json"])

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert [fn["id"] for fn in report["functions"]] == ["main.f", "main.g"]
    assert report["functions"][0]["position"]["start"] == {"line": 3, "column": 1}


def test_crud_renders_table(tmp_path: Path) -> None:
    (tmp_path / "a.go").write_text(A_GO, encoding="utf-8")
    (tmp_path / "b.go").write_text(B_GO, encoding="utf-8")

    result = runner.invoke(app, ["crud", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "main.f" in result.output
    assert "(2 functions, 0 tables)" in result.output


def test_crud_fails_on_syntax_error(tmp_path: Path) -> None:
    (tmp_path / "bad.go").write_text("package main\n\nfunc {\n", encoding="utf-8")

    result = runner.invoke(app, ["crud", str(tmp_path), "--json"])

    assert result.exit_code == 1
    assert "bad.go" in result.output


def test_crud_rejects_missing_directory(tmp_path: Path) -> None:
    result = runner.invoke(app, ["crud", str(tmp_path / "missing")])
    assert result.exit_code == 1
