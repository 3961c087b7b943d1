from __future__ import annotations

import json
from pathlib import Path

import pytest

from contrib_stats.config import find_config, load_config, resolve_settings, verify_settings
from contrib_stats.errors import ConfigError


def test_defaults(tmp_path: Path) -> None:
    s = resolve_settings(tmp_path, {})
    assert s.root == str(tmp_path.resolve())
    assert s.name == tmp_path.name
    assert s.threshold == 15
    assert s.people_min_lines == 50
    assert s.people_min_percent == 10.0
    assert s.port == 8888
    assert s.classifier == "linguist"
    assert s.attribution == "blame"
    assert s.revision == "HEAD"
    assert s.ignore_file == ".contribignore"


def test_cli_overrides_config_file(tmp_path: Path) -> None:
    config = {"threshold": 30, "port": 9000, "attribution": "gitpython", "unknown_key": True}
    s = resolve_settings(tmp_path, config, {"threshold": 5, "port": None, "classifier": "builtin"})
    assert s.threshold == 5
    assert s.port == 9000
    assert s.attribution == "gitpython"
    assert s.classifier == "builtin"


@pytest.mark.parametrize(
    "config",
    [
        {"threshold": -1},
        {"threshold": "15"},
        {"threshold": True},
        {"port": 70000},
        {"people_min_percent": "ten"},
        {"classifier": "magic"},
        {"attribution": "svn"},
        {"revision": "  "},
        {"host": 127},
    ],
)
def test_invalid_values_raise_config_error(tmp_path: Path, config: dict) -> None:
    with pytest.raises(ConfigError) as ei:
        resolve_settings(tmp_path, config)
    assert ei.value.details["key"] == next(iter(config))


def test_load_config(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    assert load_config(path) == {}
    path.write_text(json.dumps({"threshold": 3}), encoding="utf-8")
    assert load_config(path) == {"threshold": 3}


@pytest.mark.parametrize("text", ["{not json", "[1, 2]"])
def test_load_config_rejects_bad_files(tmp_path: Path, text: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_find_config_default_and_explicit(tmp_path: Path) -> None:
    assert find_config(tmp_path, None) == {}
    (tmp_path / ".contributors.json").write_text(json.dumps({"threshold": 7}), encoding="utf-8")
    assert find_config(tmp_path, None) == {"threshold": 7}
    with pytest.raises(ConfigError):
        find_config(tmp_path, tmp_path / "missing.json")


def test_verify_settings(tmp_path: Path) -> None:
    verify_settings(resolve_settings(tmp_path, {}))
    with pytest.raises(ConfigError):
        verify_settings(resolve_settings(tmp_path / "missing", {}))
    f = tmp_path / "file.txt"
    f.write_text("x", encoding="utf-8")
    with pytest.raises(ConfigError):
        verify_settings(resolve_settings(f, {}))
