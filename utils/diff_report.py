#!/usr/bin/env python3
"""Reconcile two branch snapshots and render the size report comment.

Every path in the union of both snapshots is classified exactly once:
added (subject only), removed (target only), modified (both, size differs)
or unchanged (both, same size). Unchanged paths never show up in the report.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from configs.config import Config
from utils.byte_format import pretty_bytes, signed_delta
from utils.stats_models import BranchStats, ChangeTotals, FileChange, FileMetric


def escape_cell(s: str) -> str:
    return s.replace("|", "\\|") if s else s


def common_path_prefix(paths: Iterable[str]) -> str:
    """Longest directory prefix shared by all paths, ending with '/'.

    The common prefix of a sorted set equals the common prefix of its first and
    last element, so only those two are compared. The raw prefix is then cut
    back to the last '/' so it never ends in a partial file or directory name.
    Fewer than two paths have no prefix worth stripping.
    """
    ordered = sorted(set(paths))
    if len(ordered) < 2:
        return ""
    first, last = ordered[0], ordered[-1]
    length = 0
    for a, b in zip(first, last):
        if a != b:
            break
        length += 1
    common = first[:length]
    return common[: common.rfind("/") + 1]


def classify_path(path: str, target: BranchStats, subject: BranchStats) -> FileChange:
    current = subject.files.get(path)
    previous = target.files.get(path)
    if previous is None and current is None:
        raise KeyError(f"{path} is in neither snapshot")
    if previous is None:
        status = "added"
    elif current is None:
        status = "removed"
    elif current.size != previous.size:
        status = "modified"
    else:
        status = "unchanged"
    return FileChange(path=path, status=status, current=current, previous=previous)


def classify_changes(target: BranchStats, subject: BranchStats) -> List[FileChange]:
    """One FileChange per path of the union of both snapshots, in path order."""
    union = sorted(set(target.files) | set(subject.files))
    return [classify_path(path, target, subject) for path in union]


def _cell(value: str, delta: str) -> str:
    return f"<sub>{value} `{delta}`</sub>"


ZERO_METRIC = FileMetric(size=0, gzip_size=0, brotli_size=0)


def _metric_cells(current: Optional[FileMetric], previous: Optional[FileMetric]) -> List[str]:
    # Missing side counts as zero: added rows delta the full metric, removed rows show 0 B
    cur = current or ZERO_METRIC
    prev = previous or ZERO_METRIC
    return [
        _cell(pretty_bytes(cur.size), signed_delta(cur.size, prev.size)),
        _cell(pretty_bytes(cur.gzip_size), signed_delta(cur.gzip_size, prev.gzip_size)),
        _cell(pretty_bytes(cur.brotli_size), signed_delta(cur.brotli_size, prev.brotli_size)),
    ]


def render_row(change: FileChange, prefix: str = "") -> str:
    name = escape_cell(change.path[len(prefix):] if change.path.startswith(prefix) else change.path)
    if change.status == "removed":
        name = f"~{name}~"
    cells = [f"<sub>{name}</sub>"] + _metric_cells(change.current, change.previous)
    return "| " + " | ".join(cells) + " |"


def _pluralize(count: int, single: str, plural: str) -> str:
    return f"{count} {single if count == 1 else plural}"


def details_summary(totals: ChangeTotals) -> str:
    """Comma-joined counts, zero-count categories omitted."""
    parts = []
    if totals.changed:
        parts.append(_pluralize(totals.changed, "file changed", "files changed"))
    if totals.added:
        parts.append(_pluralize(totals.added, "file added", "files added"))
    if totals.removed:
        parts.append(_pluralize(totals.removed, "file removed", "files removed"))
    return ", ".join(parts)


def render_report(
    target: BranchStats,
    subject: BranchStats,
    details_open: bool = False,
    *,
    marker: Optional[str] = None,
) -> str:
    """Render the markdown comment comparing `subject` against `target`.

    Args:
        target: Snapshot of the branch diffed against
        subject: Snapshot of the pull request branch
        details_open: Expand the per-file table by default
        marker: Leading marker identifying our comments (Config.COMMENT_MARKER)

    Returns:
        The full comment body, starting with the marker
    """
    marker = Config.COMMENT_MARKER if marker is None else marker

    size_delta = signed_delta(subject.total_size, target.total_size)
    gzip_delta = signed_delta(subject.total_gzip, target.total_gzip)
    brotli_delta = signed_delta(subject.total_brotli, target.total_brotli)
    direction = "added" if size_delta.startswith("+") else "removed"

    changes = classify_changes(target, subject)
    prefix = common_path_prefix(c.path for c in changes)
    reported = [c for c in changes if c.is_reported]
    totals = ChangeTotals.from_changes(reported)

    lines = [
        marker,
        f"<sub>{Config.REPORT_LINK} The total bytes {direction} are:</sub>",
        "  | uncompressed | gzip | brotli |",
        "  |:--- |:--- |:--- |",
        "  | " + " | ".join([
            _cell(pretty_bytes(subject.total_size), size_delta),
            _cell(pretty_bytes(subject.total_gzip), gzip_delta),
            _cell(pretty_bytes(subject.total_brotli), brotli_delta),
        ]) + " |",
        "",
        "",
        f"  <details{' open' if details_open else ''}>",
        f"    <summary><sub>{details_summary(totals)}</sub></summary>",
        "",
        f"<sub>All changed files are in {prefix}</sub>" if prefix else "",
        "",
        "| Filename | size  | gzip | brotli |",
        "|:--- | ---:| ---:| ---:|",
    ]
    lines.extend(render_row(change, prefix) for change in reported)
    lines.append("  </details>")
    return "\n".join(lines) + "\n"
