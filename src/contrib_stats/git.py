from __future__ import annotations

import subprocess
from pathlib import Path

from .errors import RepositoryError


def run_git(args: list[str], cwd: Path, timeout_s: int | None = None) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def _git_or_fail(args: list[str], cwd: Path) -> tuple[int, str, str]:
    try:
        return run_git(args, cwd=cwd)
    except OSError as e:
        raise RepositoryError(f"cannot run git: {e}", command="git") from e


def resolve_revision(repo: Path, revision: str) -> str:
    """Return the full commit sha `revision` points at."""
    code, out, err = _git_or_fail(["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"], cwd=repo)
    sha = out.strip()
    if code != 0 or not sha:
        reason = err.strip() or "revision does not resolve to a commit"
        raise RepositoryError(reason, path=str(repo), revision=revision)
    return sha


def list_tracked_files(repo: Path, revision: str) -> list[str]:
    code, out, err = _git_or_fail(["ls-tree", "-r", "-z", "--name-only", revision], cwd=repo)
    if code != 0:
        raise RepositoryError(err.strip() or "git ls-tree failed", path=str(repo), revision=revision)
    return [p for p in out.split("\0") if p]
