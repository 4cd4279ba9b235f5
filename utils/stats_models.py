#!/usr/bin/env python3
"""Pydantic models for branch size statistics.

This module defines the per-file size triad, the per-branch snapshot built
from it, and the derived change records used by the report renderer.
"""

from __future__ import annotations

from typing import Dict, Iterable, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


ChangeStatus = Literal["added", "removed", "modified", "unchanged"]


class FileMetric(BaseModel):
    """Uncompressed, gzip and brotli byte sizes of one file."""

    size: int = Field(..., ge=0, description="Size on disk in bytes")
    gzip_size: int = Field(..., ge=0, description="Size after gzip compression")
    brotli_size: int = Field(..., ge=0, description="Size after brotli compression")

    model_config = ConfigDict(frozen=True, extra="ignore")


class BranchStats(BaseModel):
    """Size snapshot of the globbed file set of one branch.

    Keys of `files` are POSIX paths relative to the branch workspace root, so
    the same logical file has the same key in both snapshots of a run.
    """

    total_size: int = 0
    total_gzip: int = 0
    total_brotli: int = 0
    files: Dict[str, FileMetric] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def from_metrics(cls, items: Iterable[Tuple[str, FileMetric]]) -> "BranchStats":
        """Fold (relative_path, metric) pairs into a snapshot.

        Totals are sums, so the result does not depend on the order in which
        concurrent collection produced the pairs.
        """
        files: Dict[str, FileMetric] = {}
        total_size = total_gzip = total_brotli = 0
        for path, metric in items:
            if path in files:
                raise ValueError(f"Duplicate file key in branch stats: {path}")
            files[path] = metric
            total_size += metric.size
            total_gzip += metric.gzip_size
            total_brotli += metric.brotli_size
        return cls(
            total_size=total_size,
            total_gzip=total_gzip,
            total_brotli=total_brotli,
            files=dict(sorted(files.items())),
        )

    @property
    def file_count(self) -> int:
        return len(self.files)


class FileChange(BaseModel):
    """Classification of one path across the target and subject snapshots."""

    path: str
    status: ChangeStatus
    current: Optional[FileMetric] = Field(None, description="Metric in the subject branch")
    previous: Optional[FileMetric] = Field(None, description="Metric in the target branch")

    model_config = ConfigDict(frozen=True)

    @property
    def is_reported(self) -> bool:
        return self.status != "unchanged"


class ChangeTotals(BaseModel):
    """Counts of reported file changes."""

    changed: int = 0
    added: int = 0
    removed: int = 0

    @classmethod
    def from_changes(cls, changes: Iterable[FileChange]) -> "ChangeTotals":
        counts = {"modified": 0, "added": 0, "removed": 0}
        for change in changes:
            if change.status in counts:
                counts[change.status] += 1
        return cls(changed=counts["modified"], added=counts["added"], removed=counts["removed"])


class ActionInputs(BaseModel):
    """Validated inputs of one filediff run."""

    target_branch: str = Field(..., min_length=1, description="Branch to diff against")
    dir_glob: str = Field(..., min_length=1, description="Comma-separated glob patterns")
    pre_diff_script: Optional[str] = Field(None, description="'&&'-joined build commands")
    file_details_open: bool = Field(False, description="Expand the per-file table by default")
    replace_comment: bool = Field(True, description="Delete earlier filediff comments first")

    model_config = {"extra": "ignore"}
