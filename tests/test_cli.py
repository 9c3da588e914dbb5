from __future__ import annotations

import argparse

import pytest

from capstone_panels.cli import main, parse_context
from capstone_panels.panel_formation import auto_create_panels


def test_parse_context() -> None:
    ctx = parse_context("SCOPE: BTech")
    assert (ctx.school, ctx.department) == ("SCOPE", "BTech")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_context("SCOPE")


def test_writes_text_report(seeded_store, context, tmp_path, capsys) -> None:
    auto_create_panels(seeded_store, context)
    output = tmp_path / "report.txt"

    code = main(["--data-dir", str(seeded_store.root), "--output", str(output), "--context", "SCOPE:BTech"])

    assert code == 0
    assert "Report generated at" in capsys.readouterr().out
    text = output.read_text(encoding="utf-8")
    assert "Department: BTech" in text
    assert "Panels fetched: 2" in text


def test_writes_csv_report(seeded_store, context, tmp_path) -> None:
    auto_create_panels(seeded_store, context)
    output = tmp_path / "report.csv"

    assert main(["--data-dir", str(seeded_store.root), "--output", str(output), "--format", "csv"]) == 0
    assert output.read_text(encoding="utf-8").splitlines()[0].startswith("school,department,review_selection")
