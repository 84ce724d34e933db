"""
Text rendering of comparison results.

Scores are always printed with six decimals so repeated runs over the
same inputs give byte-identical output.

Styles:
    lines  <score> "<a>" "<b>" per pair (match mode omits the target)
    table  aligned columns under a header
    json   {"entries": [...], "skipped": [...], "interrupted": bool}
"""

import json
from typing import List

from .models import RankedReport, SimilarityScore

STYLES = ("lines", "table", "json")
SCORE_FORMAT = "{:.6f}"


def format_score(score: float) -> str:
    return SCORE_FORMAT.format(score)


def format_pair(result: SimilarityScore) -> str:
    """One line for pair mode: just the score."""
    return format_score(result.score)


def format_report(report: RankedReport, style: str = "lines", mode: str = "directory") -> str:
    """
    Render a ranked report.

    Args:
        report: Result of a batch run.
        style: One of STYLES.
        mode: "directory" prints both paths per entry, "match" only the
            candidate (the target is the same on every line).

    Returns:
        The rendered text without a trailing newline (empty when there is
        nothing to report).
    """
    if style not in STYLES:
        raise ValueError(f"Unknown report style {style!r}, expected one of {STYLES}")
    if style == "json":
        return _format_json(report)

    show_a = mode != "match"
    lines = _format_table(report, show_a) if style == "table" else _format_lines(report, show_a)
    for entry in report.skipped:
        lines.append(f'skipped "{entry.source}": {entry.reason}')
    if report.interrupted:
        lines.append("interrupted: partial results")
    return "\n".join(lines)


def _format_lines(report: RankedReport, show_a: bool) -> List[str]:
    if show_a:
        return [f'{format_score(e.score)} "{e.source_a}" "{e.source_b}"' for e in report.entries]
    return [f'{format_score(e.score)} "{e.source_b}"' for e in report.entries]


def _format_table(report: RankedReport, show_a: bool) -> List[str]:
    header = ["rank", "score", "image_a", "image_b"] if show_a else ["rank", "score", "image"]
    rows = []
    for rank, entry in enumerate(report.entries, start=1):
        row = [str(rank), format_score(entry.score)]
        row += [entry.source_a, entry.source_b] if show_a else [entry.source_b]
        rows.append(row)

    widths = [max(len(r[i]) for r in [header] + rows) for i in range(len(header))]

    def render(row):
        return "  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip()

    lines = [render(header), render(["-" * w for w in widths])]
    lines += [render(row) for row in rows]
    return lines


def _format_json(report: RankedReport) -> str:
    payload = {
        "entries": [
            {"score": round(e.score, 6), "image_a": e.source_a, "image_b": e.source_b}
            for e in report.entries
        ],
        "skipped": [{"image": s.source, "reason": s.reason} for s in report.skipped],
        "interrupted": report.interrupted,
        "candidates": report.candidates,
    }
    return json.dumps(payload, indent=2)
