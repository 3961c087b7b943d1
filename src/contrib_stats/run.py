from __future__ import annotations

import sys
from pathlib import Path

from .aggregate import aggregate
from .attribution import AttributionSource, make_source
from .classify import RepoContents, make_classifier
from .ignore import IgnorePattern, load_ignore_patterns
from .models import LanguageBucket, Report, Settings


class Progress:
    """Progress lines on stderr, so the report on stdout stays pipeable."""

    def __init__(self, *, verbose: bool = False, quiet: bool = False):
        self.verbose = verbose
        self.quiet = quiet

    def say(self, msg: str) -> None:
        if not self.quiet:
            print(msg, file=sys.stderr, flush=True)

    def bucket(self, language: str, files: list[str]) -> None:
        self.say(f"{language}: {len(files)} files")

    def file(self, path: str, nlines: int) -> None:
        if self.verbose:
            self.say(f"  {path}: {nlines} lines")


def build_report(
    settings: Settings,
    *,
    contents: RepoContents | None = None,
    source: AttributionSource | None = None,
    progress: Progress | None = None,
) -> Report:
    """
    Run the whole pipeline once: classify, load ignore patterns, attribute every
    bucket. `contents` and `source` default to the configured classifier and
    attribution backend. A source created here is closed once attribution
    finishes; a caller-supplied one is left open.
    """
    progress = progress or Progress(quiet=True)
    root = Path(settings.root)
    progress.say(f"Analysing the repository {root}...")

    ignore_patterns = load_ignore_patterns(root, settings.ignore_file)
    if source is not None:
        buckets = _aggregate(settings, root, contents, ignore_patterns, source, progress)
    else:
        with make_source(settings) as owned:
            buckets = _aggregate(settings, root, contents, ignore_patterns, owned, progress)
    return Report(name=settings.name, root=settings.root, revision=settings.revision, buckets=tuple(buckets))


def _aggregate(
    settings: Settings,
    root: Path,
    contents: RepoContents | None,
    ignore_patterns: list[IgnorePattern],
    source: AttributionSource,
    progress: Progress,
) -> list[LanguageBucket]:
    if contents is None:
        contents = make_classifier(settings).classify(root)
    return aggregate(
        contents,
        ignore_patterns,
        source,
        on_bucket=progress.bucket,
        on_file=progress.file,
    )
