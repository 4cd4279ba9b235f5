#!/usr/bin/env python3
"""Per-branch workspace materialization.

Copies the current checkout into an isolated directory per branch and switches
that copy to the branch tip, so both branches can be built and measured side by
side without touching the source checkout.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from configs.config import Config
from utils.errors import FileDiffError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class WorkspaceError(FileDiffError):
    """Raised when a branch workspace cannot be copied, fetched or checked out."""

    def __init__(self, message: str, code: str = "WORKSPACE"):
        super().__init__(message, code=code)


def run_git(args: List[str], cwd: PathLike) -> subprocess.CompletedProcess:
    """Run a git command inside `cwd`.

    Raises:
        WorkspaceError: If git is missing or exits non-zero
    """
    cmd = ["git"] + list(args)
    logger.debug(f"Running {' '.join(cmd)} in {cwd}")
    try:
        return subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=True
        )
    except FileNotFoundError as e:
        raise WorkspaceError(f"git executable not found: {e}", code="GIT_MISSING") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise WorkspaceError(
            f"'{' '.join(cmd)}' failed with exit code {e.returncode}: {stderr}",
            code="GIT",
        ) from e


def workspace_path(branch: str, workspace_root: Optional[PathLike] = None) -> Path:
    """Directory that holds the copy of the checkout for `branch`."""
    root = Path(workspace_root if workspace_root is not None else Config.WORKSPACE_ROOT)
    return (root / branch).resolve()


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def materialize_workspace(
    branch: str,
    *,
    source_dir: PathLike = ".",
    workspace_root: Optional[PathLike] = None,
    remote: Optional[str] = None,
) -> Path:
    """Copy the checkout into its own directory and check out `branch` there.

    Args:
        branch: Branch to check out in the copy
        source_dir: The checkout to copy (defaults to the current directory)
        workspace_root: Parent directory of all branch workspaces
        remote: Remote to fetch the branch from (defaults to Config.GIT_REMOTE)

    Returns:
        Absolute path of the branch workspace

    Raises:
        WorkspaceError: On any copy, fetch or checkout failure
    """
    if not branch or not branch.strip():
        raise WorkspaceError("Branch name is required to materialize a workspace", code="BRANCH")

    source = Path(source_dir).resolve()
    target = workspace_path(branch, workspace_root)
    remote = remote or Config.GIT_REMOTE

    if _is_within(target, source):
        raise WorkspaceError(
            f"Workspace {target} must not be inside the checkout {source}",
            code="LAYOUT",
        )

    logger.info(f"[{branch}] copy repo and git checkout")
    try:
        shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise WorkspaceError(f"[{branch}] Failed to copy {source} to {target}: {e}", code="COPY") from e

    run_git(["fetch", remote, branch], cwd=target)
    run_git(["checkout", branch], cwd=target)
    logger.debug(f"[{branch}] Workspace ready at {target}")
    return target
