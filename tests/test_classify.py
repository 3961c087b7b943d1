from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path

import pytest

from contrib_stats.classify import (
    BuiltinClassifier,
    LinguistClassifier,
    decode_linguist_output,
    language_for_path,
    make_classifier,
)
from contrib_stats.errors import ClassifierError, ConfigError, RepositoryError
from contrib_stats.models import Settings


def _write_fake_linguist(bin_dir: Path, *, stdout: str, code: int = 0) -> Path:
    bin_dir.mkdir(parents=True, exist_ok=True)
    script = bin_dir / "github-linguist"
    script.write_text(
        "\n".join(
            [
                "#!/usr/bin/env python3",
                "import sys",
                "",
                f"OUT = {stdout!r}",
                "",
                "def main() -> int:",
                "    if sys.argv[2:] != ['--breakdown', '--json']:",
                "        sys.stderr.write('unexpected args: ' + ' '.join(sys.argv) + '\\n')",
                "        return 2",
                "    sys.stdout.write(OUT)",
                f"    if {code}:",
                "        sys.stderr.write('linguist exploded\\n')",
                f"    return {code}",
                "",
                "if __name__ == '__main__':",
                "    raise SystemExit(main())",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    script.chmod(0o755)
    return script


def test_language_for_path() -> None:
    assert language_for_path("Dockerfile") == "Dockerfile"
    assert language_for_path("Makefile") == "Makefile"
    assert language_for_path("src/main.py") == "Python"
    assert language_for_path("cmd/main.go") == "Go"
    assert language_for_path("README.md") == "Markdown"
    assert language_for_path("src/thing.unknownext") is None
    assert language_for_path("LICENSE") is None


def test_decode_plain_file_lists() -> None:
    out = json.dumps({"Go": ["a.go", "b.go"], "Markdown": ["README.md"]})
    assert decode_linguist_output(out) == {"Go": ["a.go", "b.go"], "Markdown": ["README.md"]}


def test_decode_breakdown_objects_preserves_order() -> None:
    out = json.dumps(
        {
            "Shell": {"size": 10, "percentage": "1.00", "files": ["run.sh"]},
            "Go": {"size": 990, "percentage": "99.00", "files": ["a.go"]},
        }
    )
    contents = decode_linguist_output(out)
    assert list(contents) == ["Shell", "Go"]
    assert contents["Go"] == ["a.go"]


@pytest.mark.parametrize(
    "out",
    [
        "not json",
        json.dumps(["Go"]),
        json.dumps({"Go": {"size": 10, "percentage": "100.00"}}),
        json.dumps({"Go": [1, 2]}),
    ],
)
def test_decode_failures_are_classifier_errors(out: str) -> None:
    with pytest.raises(ClassifierError):
        decode_linguist_output(out)


def test_linguist_subprocess(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_fake_linguist(tmp_path / "bin", stdout=json.dumps({"Go": ["a.go"]}))
    monkeypatch.setenv("PATH", str(tmp_path / "bin") + os.pathsep + os.environ.get("PATH", ""))
    assert LinguistClassifier().classify(tmp_path) == {"Go": ["a.go"]}


def test_linguist_non_zero_exit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_fake_linguist(tmp_path / "bin", stdout="", code=1)
    monkeypatch.setenv("PATH", str(tmp_path / "bin") + os.pathsep + os.environ.get("PATH", ""))
    with pytest.raises(ClassifierError) as ei:
        LinguistClassifier().classify(tmp_path)
    assert "linguist exploded" in str(ei.value)


def test_linguist_missing_executable(tmp_path: Path) -> None:
    with pytest.raises(ClassifierError) as ei:
        LinguistClassifier(str(tmp_path / "nope" / "github-linguist")).classify(tmp_path)
    assert "No such file" in str(ei.value)


def _run(cmd: list[str], *, cwd: Path) -> None:
    subprocess.run(cmd, cwd=str(cwd), check=True, capture_output=True, text=True)


def test_builtin_classifier_lists_tracked_files(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    _run(["git", "init", "-q"], cwd=repo)
    _run(["git", "config", "user.name", "Repo User"], cwd=repo)
    _run(["git", "config", "user.email", "repo@example.com"], cwd=repo)
    _run(["git", "config", "commit.gpgsign", "false"], cwd=repo)
    for rel in ("main.go", "pkg/util.go", "README.md", "LICENSE"):
        p = repo / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("x\n", encoding="utf-8")
    _run(["git", "add", "."], cwd=repo)
    _run(["git", "commit", "-q", "-m", "init"], cwd=repo)
    (repo / "untracked.go").write_text("x\n", encoding="utf-8")

    contents = BuiltinClassifier().classify(repo)
    assert contents == {"Markdown": ["README.md"], "Go": ["main.go", "pkg/util.go"]}


def test_builtin_classifier_outside_repository(tmp_path: Path) -> None:
    with pytest.raises(RepositoryError):
        BuiltinClassifier().classify(tmp_path)


def test_make_classifier() -> None:
    assert isinstance(make_classifier(Settings(root="/r", name="r")), LinguistClassifier)
    assert isinstance(make_classifier(Settings(root="/r", name="r", classifier="builtin")), BuiltinClassifier)
    with pytest.raises(ConfigError):
        make_classifier(Settings(root="/r", name="r", classifier="magic"))


def test_linguist_not_executable(tmp_path: Path) -> None:
    script = _write_fake_linguist(tmp_path / "bin", stdout="{}")
    script.chmod(0o644)
    with pytest.raises(ClassifierError) as ei:
        LinguistClassifier(str(script)).classify(tmp_path)
    assert "cannot run classifier" in str(ei.value)
