"""
Line attribution: for every line currently in a file, who last touched it.

Two interchangeable sources satisfy the same contract:

- `BlameCommandSource` shells out to `git blame --line-porcelain` per file;
- `GitPythonSource` reads blame data through GitPython against one resolved commit.

The aggregation engine only sees `attribute_lines(path) -> list[str]`.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

import git as gitpython
from git.exc import BadName, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from .errors import AttributionError, ConfigError, RepositoryError
from .git import resolve_revision, run_git
from .models import Settings

AUTHOR_MAIL_RE = re.compile(r"^author-mail <(.*)>$")


class AttributionSource(Protocol):
    def attribute_lines(self, path: str) -> list[str]:
        ...


def parse_line_porcelain(output: str) -> list[str]:
    # --line-porcelain repeats the full header for every line, so there is
    # exactly one author-mail entry per blamed line.
    identities: list[str] = []
    for line in output.splitlines():
        if line.startswith("\t"):
            continue
        m = AUTHOR_MAIL_RE.match(line)
        if m:
            identities.append(m.group(1))
    return identities


class BlameCommandSource:
    def __init__(self, root: Path, revision: str = "HEAD"):
        self.root = root
        self.revision = revision
        self.commit = resolve_revision(root, revision)

    def __enter__(self) -> BlameCommandSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        pass

    def attribute_lines(self, path: str) -> list[str]:
        args = ["blame", "--line-porcelain", self.commit, "--", path]
        try:
            code, out, err = run_git(args, cwd=self.root)
        except OSError as e:
            raise AttributionError(f"cannot run git: {e}", path=path, command="git blame") from e
        if code != 0:
            raise AttributionError(err.strip() or f"git blame exited with {code}", path=path, command="git blame")
        return parse_line_porcelain(out)


class GitPythonSource:
    def __init__(self, root: Path, revision: str = "HEAD"):
        self.root = root
        self.revision = revision
        try:
            self.repo = gitpython.Repo(str(root), search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryError("not a git repository", path=str(root)) from e
        if self.repo.working_tree_dir is None:
            self.repo.close()
            raise RepositoryError("bare repositories have no working tree", path=str(root))
        # GitPython runs git from the top of the working tree; paths arrive
        # relative to `root`.
        self.prefix = Path(root).resolve().relative_to(Path(self.repo.working_tree_dir).resolve())
        try:
            self.commit = self.repo.commit(revision)
        except (BadName, ValueError, GitCommandError) as e:
            self.repo.close()
            raise RepositoryError(f"cannot resolve revision: {e}", path=str(root), revision=revision) from e

    def __enter__(self) -> GitPythonSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.repo.close()

    def attribute_lines(self, path: str) -> list[str]:
        try:
            entries = self.repo.blame(self.commit, (self.prefix / path).as_posix())
        except GitCommandError as e:
            msg = str(e.stderr or "").strip() or str(e)
            raise AttributionError(msg, path=path, command="gitpython blame") from e
        identities: list[str] = []
        for commit, lines in entries or []:
            identities.extend([commit.author.email or ""] * len(lines))
        return identities


ATTRIBUTION_BACKENDS = ("blame", "gitpython")


def make_source(settings: Settings) -> BlameCommandSource | GitPythonSource:
    root = Path(settings.root)
    if settings.attribution == "blame":
        return BlameCommandSource(root, settings.revision)
    if settings.attribution == "gitpython":
        return GitPythonSource(root, settings.revision)
    raise ConfigError(f"unknown attribution backend: {settings.attribution!r}", key="attribution")
