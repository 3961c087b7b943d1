from __future__ import annotations

from pathlib import Path

from .errors import ConfigError
from .models import Report, Settings
from .render import render_html, render_json, render_text

REPORT_FILES = ("index.html", "report.txt", "report.json")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def prepare_output_dir(path: Path, *, force: bool) -> None:
    """Refuse to reuse a non-empty directory unless `force` is set."""
    if path.exists() and not path.is_dir():
        raise ConfigError("output path exists and is not a directory", path=str(path))
    if path.is_dir() and any(path.iterdir()) and not force:
        raise ConfigError("output directory is not empty (use --force to overwrite)", path=str(path))
    try:
        ensure_dir(path)
    except OSError as e:
        raise ConfigError(f"cannot create output directory: {e}", path=str(path)) from e


def write_reports(path: Path, report: Report, settings: Settings, *, force: bool = False) -> list[Path]:
    prepare_output_dir(path, force=force)
    contents = {
        "index.html": render_html(report, settings),
        "report.txt": render_text(report, settings),
        "report.json": render_json(report),
    }
    written: list[Path] = []
    for name in REPORT_FILES:
        target = path / name
        target.write_text(contents[name], encoding="utf-8")
        written.append(target)
    return written
