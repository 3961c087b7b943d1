from __future__ import annotations

import dataclasses

DEFAULT_THRESHOLD = 15
DEFAULT_PEOPLE_MIN_LINES = 50
DEFAULT_PEOPLE_MIN_PERCENT = 10.0
DEFAULT_PORT = 8888
DEFAULT_IGNORE_FILE = ".contribignore"


@dataclasses.dataclass(frozen=True)
class ContributionRecord:
    identity: str
    line_count: int
    percentage: float


# Same shape as a bucket contribution; percentage is relative to the grand total.
GlobalAuthorRecord = ContributionRecord


@dataclasses.dataclass(frozen=True)
class LanguageBucket:
    language: str
    files: tuple[str, ...] = ()
    total_lines: int = 0
    contributions: tuple[ContributionRecord, ...] = ()


@dataclasses.dataclass(frozen=True)
class Report:
    name: str
    root: str
    revision: str
    buckets: tuple[LanguageBucket, ...] = ()

    @property
    def grand_total(self) -> int:
        return sum(b.total_lines for b in self.buckets)

    def people(self) -> list[GlobalAuthorRecord]:
        from .aggregate import rollup

        return rollup(self.buckets)


@dataclasses.dataclass(frozen=True)
class Settings:
    root: str
    name: str
    threshold: int = DEFAULT_THRESHOLD
    people_min_lines: int = DEFAULT_PEOPLE_MIN_LINES
    people_min_percent: float = DEFAULT_PEOPLE_MIN_PERCENT
    host: str = ""
    port: int = DEFAULT_PORT
    classifier: str = "linguist"
    linguist_command: str = "github-linguist"
    attribution: str = "blame"
    revision: str = "HEAD"
    ignore_file: str = DEFAULT_IGNORE_FILE

    @property
    def listen(self) -> str:
        return f"{self.host}:{self.port}"
