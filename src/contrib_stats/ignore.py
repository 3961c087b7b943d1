from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

from wcmatch import glob as wcglob
from wcmatch._wcparse import PatternLimitException

from .errors import ConfigError

# `**` spans directories, `{a,b}` alternates, `*` also matches dotfiles,
# and "/" is the only separator on every platform.
GLOB_FLAGS = wcglob.GLOBSTAR | wcglob.BRACE | wcglob.DOTGLOB | wcglob.FORCEUNIX


@dataclasses.dataclass(frozen=True)
class IgnorePattern:
    glob: str
    matcher: Any

    def matches(self, path: str) -> bool:
        return self.matcher.match(normalize_path(path))


def normalize_path(path: str) -> str:
    p = path.replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    return p


def compile_pattern(glob: str) -> IgnorePattern:
    try:
        matcher = wcglob.compile(glob, flags=GLOB_FLAGS)
    except (ValueError, PatternLimitException) as e:
        raise ConfigError(f"invalid glob: {e}", pattern=glob) from e
    return IgnorePattern(glob=glob, matcher=matcher)


def parse_ignore_lines(lines: list[str], *, source: str = "") -> list[IgnorePattern]:
    patterns: list[IgnorePattern] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip()
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        try:
            patterns.append(compile_pattern(line))
        except ConfigError as e:
            e.details.setdefault("file", source)
            e.details.setdefault("line", lineno)
            raise
    return patterns


def load_ignore_patterns(root: Path, filename: str) -> list[IgnorePattern]:
    """
    Read `root/filename`. A missing file means no patterns; an unreadable file
    or an invalid pattern is a ConfigError.
    """
    path = root / filename
    if not path.exists():
        return []
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read ignore file: {e}", path=str(path)) from e
    return parse_ignore_lines(text.splitlines(), source=str(path))


def should_ignore(path: str, patterns: list[IgnorePattern]) -> bool:
    for pat in patterns:
        if pat.matches(path):
            return True
    return False


def filter_files(patterns: list[IgnorePattern], files: list[str]) -> list[str]:
    if not patterns:
        return list(files)
    return [f for f in files if not should_ignore(f, patterns)]
