from __future__ import annotations

import json
import subprocess
from pathlib import Path

from .errors import ClassifierError, ConfigError
from .git import list_tracked_files
from .models import Settings

RepoContents = dict[str, list[str]]

_BY_EXT = {
    ".py": "Python",
    ".ipynb": "Jupyter Notebook",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TSX",
    ".java": "Java",
    ".kt": "Kotlin",
    ".swift": "Swift",
    ".go": "Go",
    ".rs": "Rust",
    ".php": "PHP",
    ".rb": "Ruby",
    ".cs": "C#",
    ".c": "C",
    ".h": "C",
    ".cpp": "C++",
    ".cc": "C++",
    ".hpp": "C++",
    ".m": "Objective-C",
    ".mm": "Objective-C++",
    ".scala": "Scala",
    ".hs": "Haskell",
    ".el": "Emacs Lisp",
    ".nix": "Nix",
    ".sql": "SQL",
    ".tf": "HCL",
    ".yml": "YAML",
    ".yaml": "YAML",
    ".json": "JSON",
    ".toml": "TOML",
    ".ini": "INI",
    ".md": "Markdown",
    ".rst": "reStructuredText",
    ".org": "Org",
    ".html": "HTML",
    ".htm": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".sass": "Sass",
    ".less": "Less",
    ".sh": "Shell",
    ".bash": "Shell",
    ".zsh": "Shell",
    ".ps1": "PowerShell",
    ".bat": "Batchfile",
    ".xml": "XML",
    ".proto": "Protocol Buffer",
}


def language_for_path(path: str) -> str | None:
    p = path.replace("\\", "/")
    base = p.rsplit("/", 1)[-1]
    if base == "Dockerfile" or base.lower().startswith("dockerfile."):
        return "Dockerfile"
    if base in ("Makefile", "makefile", "GNUmakefile"):
        return "Makefile"
    return _BY_EXT.get(Path(base).suffix.lower())


def decode_linguist_output(out: str) -> RepoContents:
    """
    Accept `{language: [files]}` (older linguist) or `{language: {"files": [...], ...}}`
    (`--breakdown --json`). Anything else is a ClassifierError.
    """
    try:
        data = json.loads(out)
    except json.JSONDecodeError as e:
        raise ClassifierError(f"cannot decode linguist output: {e}", command="linguist") from e
    if not isinstance(data, dict):
        raise ClassifierError("linguist output is not a JSON object", command="linguist")

    contents: RepoContents = {}
    for language, value in data.items():
        files = value.get("files") if isinstance(value, dict) else value
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ClassifierError("linguist output has no file list", command="linguist", language=language)
        contents[str(language)] = list(files)
    return contents


class LinguistClassifier:
    def __init__(self, command: str = "github-linguist"):
        self.command = command

    def classify(self, root: Path) -> RepoContents:
        cmd = [self.command, str(root), "--breakdown", "--json"]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8", errors="replace")
        except OSError as e:
            raise ClassifierError(f"cannot run classifier: {e}", command=self.command) from e
        if proc.returncode != 0:
            reason = proc.stderr.strip() or f"exited with {proc.returncode}"
            raise ClassifierError(f"classifier failed: {reason}", command=self.command)
        return decode_linguist_output(proc.stdout)


class BuiltinClassifier:
    """Bucket the files tracked at `revision` by extension."""

    def __init__(self, revision: str = "HEAD"):
        self.revision = revision

    def classify(self, root: Path) -> RepoContents:
        contents: RepoContents = {}
        for path in list_tracked_files(root, self.revision):
            language = language_for_path(path)
            if language is None:
                continue
            contents.setdefault(language, []).append(path)
        return contents


def make_classifier(settings: Settings) -> LinguistClassifier | BuiltinClassifier:
    if settings.classifier == "linguist":
        return LinguistClassifier(settings.linguist_command)
    if settings.classifier == "builtin":
        return BuiltinClassifier(settings.revision)
    raise ConfigError(f"unknown classifier: {settings.classifier!r}", key="classifier")
