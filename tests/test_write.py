from __future__ import annotations

import json
from pathlib import Path

import pytest

from contrib_stats.errors import ConfigError
from contrib_stats.models import LanguageBucket, Report, Settings
from contrib_stats.write import prepare_output_dir, write_reports


def _report() -> Report:
    return Report(name="demo", root="/tmp/demo", revision="HEAD", buckets=(LanguageBucket(language="Go"),))


def test_write_reports_creates_directory(tmp_path: Path) -> None:
    out = tmp_path / "a" / "b"
    written = write_reports(out, _report(), Settings(root="/tmp/demo", name="demo"))
    assert [p.name for p in written] == ["index.html", "report.txt", "report.json"]
    assert json.loads((out / "report.json").read_text(encoding="utf-8"))["languages"][0]["language"] == "Go"


def test_empty_existing_directory_is_reused(tmp_path: Path) -> None:
    prepare_output_dir(tmp_path, force=False)


def test_non_empty_directory_needs_force(tmp_path: Path) -> None:
    (tmp_path / "old.txt").write_text("x", encoding="utf-8")
    with pytest.raises(ConfigError):
        prepare_output_dir(tmp_path, force=False)
    prepare_output_dir(tmp_path, force=True)


def test_output_path_that_is_a_file(tmp_path: Path) -> None:
    f = tmp_path / "report"
    f.write_text("x", encoding="utf-8")
    with pytest.raises(ConfigError):
        prepare_output_dir(f, force=True)
