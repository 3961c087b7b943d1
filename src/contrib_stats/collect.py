from __future__ import annotations

from collections import defaultdict
from typing import Callable

from .attribution import AttributionSource
from .errors import AttributionError
from .models import ContributionRecord

FileCallback = Callable[[str, int], None]


def to_records(counts: dict[str, int], total: int) -> list[ContributionRecord]:
    """
    Turn identity -> line counts into records sorted by line count descending,
    identity ascending on ties. Percentages are relative to `total`.
    """
    records = [
        ContributionRecord(
            identity=identity,
            line_count=n,
            percentage=(n * 100.0 / total) if total else 0.0,
        )
        for identity, n in counts.items()
    ]
    records.sort(key=lambda r: (-r.line_count, r.identity))
    return records


def collect(
    files: list[str],
    source: AttributionSource,
    *,
    language: str = "",
    on_file: FileCallback | None = None,
) -> tuple[list[ContributionRecord], int]:
    counts: dict[str, int] = defaultdict(int)
    total = 0
    for path in files:
        try:
            identities = source.attribute_lines(path)
        except AttributionError as e:
            e.details.setdefault("path", path)
            if language:
                e.details["language"] = language
            raise
        for identity in identities:
            counts[identity] += 1
        total += len(identities)
        if on_file is not None:
            on_file(path, len(identities))
    return to_records(counts, total), total
