from __future__ import annotations

import dataclasses
import json
from html import escape
from typing import Callable, Sequence

from .models import ContributionRecord, LanguageBucket, Report, Settings

MinorRule = Callable[[ContributionRecord], bool]


@dataclasses.dataclass(frozen=True)
class CollapsedList:
    shown: list[ContributionRecord]
    others_count: int = 0
    others_percentage: float = 0.0


def collapse_tail(records: Sequence[ContributionRecord], is_minor: MinorRule) -> CollapsedList:
    """
    Walk `records` (sorted descending) and stop at the first minor entry that is
    not the last one; everything from there on becomes a single "N others" row
    whose share is 100 minus what was already shown.
    """
    shown: list[ContributionRecord] = []
    remaining = 100.0
    n = len(records)
    for i, r in enumerate(records):
        if i < n - 1 and is_minor(r):
            return CollapsedList(shown=shown, others_count=n - i, others_percentage=remaining)
        remaining -= r.percentage
        shown.append(r)
    return CollapsedList(shown=shown)


def people_rule(min_lines: int, min_percent: float) -> MinorRule:
    return lambda r: r.line_count < min_lines and r.percentage < min_percent


def threshold_rule(threshold: int) -> MinorRule:
    return lambda r: r.line_count < threshold


def format_percent(percent: float) -> str:
    if percent < 10:
        return f"{percent:.2f}"
    return f"{percent:.1f}"


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def short_identity(identity: str) -> str:
    # "alice@example.com" -> "alice@"; anything without "@" is shown as is.
    if "@" not in identity:
        return identity
    return identity.rsplit("@", 1)[0] + "@"


def share(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return part * 100.0 / whole


# ---------------------------------------------------------------------------
# Text


def _text_people_rows(collapsed: CollapsedList) -> list[str]:
    lines: list[str] = []
    for c in collapsed.shown:
        lines.append(f"{trunc(c.identity or '(unknown)', 44):44} {fmt_int(c.line_count):>12}  {format_percent(c.percentage):>6}%")
    if collapsed.others_count > 0:
        label = f"{collapsed.others_count} others"
        lines.append(f"{label:44} {'-':>12}  {format_percent(collapsed.others_percentage):>6}%")
    if not collapsed.shown and collapsed.others_count == 0:
        lines.append("(no attributed lines)")
    return lines


def render_text(report: Report, settings: Settings) -> str:
    title = f"Contributions to {report.name}"
    grand_total = report.grand_total
    lines: list[str] = [title, "=" * len(title), ""]
    lines.append(f"Repository: {report.root} ({report.revision})")
    lines.append("")

    lines.append("Languages")
    lines.append("-" * 72)
    lines.append(f"{'Language':28} {'Files':>10} {'Lines':>12}  {'%':>7}")
    for b in report.buckets:
        pct = share(b.total_lines, grand_total)
        lines.append(f"{trunc(b.language, 28):28} {fmt_int(len(b.files)):>10} {fmt_int(b.total_lines):>12}  {format_percent(pct):>6}%")
    if not report.buckets:
        lines.append("(no languages detected)")
    lines.append("")

    lines.append("People")
    lines.append("-" * 72)
    people = collapse_tail(report.people(), people_rule(settings.people_min_lines, settings.people_min_percent))
    lines.extend(_text_people_rows(people))
    lines.append("")

    lines.append("Contributions by language")
    lines.append("-" * 72)
    for b in report.buckets:
        lines.append("")
        lines.append(f"{b.language} ({fmt_int(len(b.files))} files, {fmt_int(b.total_lines)} lines)")
        collapsed = collapse_tail(b.contributions, threshold_rule(settings.threshold))
        lines.extend(_text_people_rows(collapsed))

    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# HTML


def _html_person_cell(identity: str) -> str:
    return f'<td><span title="{escape(identity)}">{escape(short_identity(identity))}</span></td>'


def _html_people_tbody(collapsed: CollapsedList) -> list[str]:
    out = ["<tbody>"]
    for c in collapsed.shown:
        out.append(
            "<tr>"
            + _html_person_cell(c.identity)
            + f"<td>{c.line_count}</td>"
            + f"<td>{format_percent(c.percentage)}%</td>"
            + "</tr>"
        )
    if collapsed.others_count > 0:
        out.append(
            "<tr>"
            + f"<td>{collapsed.others_count} others</td>"
            + "<td>-</td>"
            + f"<td>{format_percent(collapsed.others_percentage)}%</td>"
            + "</tr>"
        )
    out.append("</tbody>")
    return out


def _html_languages(report: Report) -> list[str]:
    grand_total = report.grand_total
    out = [
        '<table class="languages">',
        "<thead><tr><th>Language</th><th>Files</th><th>Lines</th><th>Percentage</th></tr></thead>",
        "<tbody>",
    ]
    for b in report.buckets:
        out.append(
            "<tr>"
            + f"<td>{escape(b.language)}</td>"
            + f"<td>{len(b.files)}</td>"
            + f"<td>{b.total_lines}</td>"
            + f"<td>{format_percent(share(b.total_lines, grand_total))}%</td>"
            + "</tr>"
        )
    out.extend(["</tbody>", "</table>"])
    return out


def _html_people(report: Report, settings: Settings) -> list[str]:
    collapsed = collapse_tail(report.people(), people_rule(settings.people_min_lines, settings.people_min_percent))
    out = [
        '<table class="people">',
        "<thead><tr><th>Person</th><th># lines</th><th>%</th></tr></thead>",
    ]
    out.extend(_html_people_tbody(collapsed))
    out.append("</table>")
    return out


def _html_bucket(bucket: LanguageBucket, settings: Settings) -> list[str]:
    out = [f"<h3>{escape(bucket.language)}</h3>", "<details>", "<summary>Files</summary>", "<ul>"]
    out.extend(f"<li>{escape(f)}</li>" for f in bucket.files)
    out.extend(["</ul>", "</details>"])
    out.extend(
        [
            "<table>",
            "<caption>Contributors</caption>",
            "<thead><tr><th>E-mail</th><th>Lines</th><th>Percent</th></tr></thead>",
        ]
    )
    out.extend(_html_people_tbody(collapse_tail(bucket.contributions, threshold_rule(settings.threshold))))
    out.append("</table>")
    return out


def render_html(report: Report, settings: Settings) -> str:
    title = escape(f"Contributions to {report.name}")
    out = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{title}</title>",
        "</head>",
        "<body>",
        f"<h1>{title}</h1>",
        "<h2>Languages</h2>",
    ]
    out.extend(_html_languages(report))
    out.append("<h2>People</h2>")
    out.extend(_html_people(report, settings))
    out.append("<h2>Contributions by language</h2>")
    for b in report.buckets:
        out.extend(_html_bucket(b, settings))
    out.extend(["</body>", "</html>"])
    return "\n".join(out) + "\n"


# ---------------------------------------------------------------------------
# JSON


def report_to_dict(report: Report) -> dict:
    return {
        "name": report.name,
        "root": report.root,
        "revision": report.revision,
        "total_lines": report.grand_total,
        "languages": [
            {
                "language": b.language,
                "files": list(b.files),
                "total_lines": b.total_lines,
                "contributions": [dataclasses.asdict(c) for c in b.contributions],
            }
            for b in report.buckets
        ],
        "people": [dataclasses.asdict(p) for p in report.people()],
    }


def render_json(report: Report) -> str:
    return json.dumps(report_to_dict(report), indent=2, sort_keys=False) + "\n"


RENDER_FORMATS = ("text", "html", "json")


def render(report: Report, settings: Settings, fmt: str = "text") -> str:
    if fmt == "html":
        return render_html(report, settings)
    if fmt == "json":
        return render_json(report)
    return render_text(report, settings)
