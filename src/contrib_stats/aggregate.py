from __future__ import annotations

from collections import defaultdict
from typing import Callable, Iterable, Mapping

from .attribution import AttributionSource
from .collect import FileCallback, collect, to_records
from .errors import ContribError
from .ignore import IgnorePattern, filter_files
from .models import GlobalAuthorRecord, LanguageBucket

BucketCallback = Callable[[str, list[str]], None]


def sort_buckets(buckets: Iterable[LanguageBucket]) -> list[LanguageBucket]:
    return sorted(buckets, key=lambda b: (-b.total_lines, b.language))


def aggregate(
    contents: Mapping[str, list[str]],
    ignore_patterns: list[IgnorePattern],
    source: AttributionSource,
    *,
    on_bucket: BucketCallback | None = None,
    on_file: FileCallback | None = None,
) -> list[LanguageBucket]:
    """
    Build one bucket per language: ignore-filter its files, attribute every
    remaining line, then order buckets by total lines (language name on ties).
    Any failure aborts the whole aggregation.
    """
    buckets: list[LanguageBucket] = []
    for language, unfiltered in contents.items():
        files = filter_files(ignore_patterns, list(unfiltered))
        if on_bucket is not None:
            on_bucket(language, files)
        try:
            contributions, total = collect(files, source, language=language, on_file=on_file)
        except ContribError as e:
            e.details.setdefault("language", language)
            raise
        buckets.append(
            LanguageBucket(
                language=language,
                files=tuple(files),
                total_lines=total,
                contributions=tuple(contributions),
            )
        )
    return sort_buckets(buckets)


def rollup(buckets: Iterable[LanguageBucket]) -> list[GlobalAuthorRecord]:
    """Per-author totals across every language, as a share of all attributed lines."""
    counts: dict[str, int] = defaultdict(int)
    grand_total = 0
    for b in buckets:
        grand_total += b.total_lines
        for c in b.contributions:
            counts[c.identity] += c.line_count
    if grand_total == 0:
        return []
    return to_records(counts, grand_total)
