from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

from gapviz import cli
from gapviz.tour import LESSONS


@pytest.fixture(autouse=True)
def _isolate(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in ("GAPVIZ_OUT_DIR", "GAPVIZ_THEME", "GAPVIZ_IMAGE_FORMAT", "GAPVIZ_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    # the CLI replaces root handlers
    handlers, level = logging.root.handlers[:], logging.root.level
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as info:
        cli.main(argv)
    return info.value.code


def test_help_without_command(capsys) -> None:
    cli.main([])
    assert "usage: gapviz" in capsys.readouterr().out


def test_list(capsys) -> None:
    assert _run(["list"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == len(LESSONS)
    assert out[0].startswith("first-scatter")


def test_show_table_and_csv(capsys, tmp_path: Path) -> None:
    assert _run(["show", "population-wide", "--out", str(tmp_path / "pop.csv")]) == 0
    out = capsys.readouterr().out
    assert "Rwanda" in out
    assert (tmp_path / "pop.csv").read_text().startswith("country,1997,2002,2007")


def test_show_chart_json(capsys, tmp_path: Path) -> None:
    code = _run(["show", "log-scale", "--format", "json", "--theme", "bw", "--width", "500"])
    assert code == 0
    path = tmp_path / "out" / "log-scale.json"
    assert f"[INFO] Wrote log-scale to {Path('out') / 'log-scale.json'}" in capsys.readouterr().out
    spec = json.loads(path.read_text())
    assert spec["width"] == 500
    assert spec["config"]["view"]["fill"] == "#FFFFFF"


def test_build_document(capsys, tmp_path: Path) -> None:
    out = tmp_path / "site" / "tour.html"
    assert _run(["build", "--out", str(out)]) == 0
    assert f"Wrote {len(LESSONS)} lessons" in capsys.readouterr().out
    assert out.read_text(encoding="utf-8").count("<section") == len(LESSONS)


def test_unknown_lesson_exit_code(capsys) -> None:
    assert _run(["show", "no-such-lesson"]) == 2
    assert "[ERROR] unknown lesson 'no-such-lesson'" in capsys.readouterr().err


def test_unknown_command(capsys) -> None:
    assert _run(["draw"]) == 2
    assert "Unknown command: draw" in capsys.readouterr().err


def test_invalid_settings_exit_code(capsys) -> None:
    assert _run(["show", "log-scale", "--width", "0"]) == 1
    assert "chart size must be positive" in capsys.readouterr().err


def test_missing_converter_exit_code(capsys, monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "vl_convert", None)
    assert _run(["show", "first-scatter", "--format", "png"]) == 1
    assert "vl-convert-python" in capsys.readouterr().err
