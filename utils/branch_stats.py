#!/usr/bin/env python3
"""Per-branch size snapshot: materialize, build, glob, measure."""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

from configs.config import Config
from utils.build_runner import run_build_script
from utils.file_stats import collect_file_stats, expand_globs, relative_key, split_patterns
from utils.stats_models import BranchStats
from utils.workspace import materialize_workspace

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def compute_branch_stats(
    branch: str,
    dir_glob: str,
    build_script: Optional[str] = None,
    *,
    source_dir: PathLike = ".",
    workspace_root: Optional[PathLike] = None,
    max_workers: Optional[int] = None,
) -> BranchStats:
    """Compute the BranchStats snapshot of one branch.

    Each call owns its workspace directory, so calls for different branches
    may run concurrently.

    Args:
        branch: Branch to measure
        dir_glob: Comma-separated glob patterns, relative to the repository root
        build_script: Optional '&&'-joined build pipeline run before measuring
        source_dir: Checkout copied into the workspace
        workspace_root: Parent directory of the branch workspaces
        max_workers: Thread pool size for per-file measurement

    Raises:
        WorkspaceError, BuildError, CollectionError: All fatal for the run
    """
    workspace = materialize_workspace(branch, source_dir=source_dir, workspace_root=workspace_root)
    run_build_script(build_script, workspace, label=branch)

    files = expand_globs(split_patterns(dir_glob), workspace)
    logger.info(f"[{branch}] Getting file stats for {len(files)} files")
    if files:
        sample = [relative_key(f, workspace) for f in files[:Config.LOG_SAMPLE_SIZE]]
        more = "..." if len(files) > Config.LOG_SAMPLE_SIZE else ""
        logger.info(f"[{branch}] Sample files: {', '.join(sample)}{more}")

    stats = collect_file_stats(files, workspace, max_workers=max_workers)
    logger.info(f"[{branch}] Completed file stats")
    return stats
