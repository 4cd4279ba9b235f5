#!/usr/bin/env python3
"""Pre-diff build pipeline runner.

A pipeline is a string like 'npm ci && npm run build'. It is split on '&&',
each segment trimmed and split on whitespace into a command and its arguments.
No other shell syntax (quotes, pipes, redirects, variables) is interpreted.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import List, NamedTuple, Optional, Union

from utils.errors import FileDiffError

logger = logging.getLogger(__name__)


class BuildError(FileDiffError):
    """Raised when a build step cannot be started or exits non-zero."""

    def __init__(self, message: str, code: str = "BUILD", returncode: Optional[int] = None):
        super().__init__(message, code=code)
        self.returncode = returncode


class BuildStep(NamedTuple):
    command: str
    args: List[str]

    def __str__(self) -> str:
        return " ".join([self.command] + self.args)


def parse_build_script(script: Optional[str]) -> List[BuildStep]:
    """Split a '&&'-joined pipeline into ordered build steps.

    Blank segments (e.g. a trailing '&&') are skipped.
    """
    if not script or not script.strip():
        return []
    steps: List[BuildStep] = []
    for segment in script.split("&&"):
        tokens = segment.strip().split()
        if not tokens:
            continue
        steps.append(BuildStep(command=tokens[0], args=tokens[1:]))
    return steps


def run_build_script(
    script: Optional[str],
    cwd: Union[str, "os.PathLike[str]"],
    *,
    label: str = "",
) -> int:
    """Run every step of the pipeline inside `cwd`, stopping at the first failure.

    Args:
        script: '&&'-joined pipeline; None or blank is a no-op
        cwd: Workspace directory the steps run in
        label: Log prefix, usually the branch name

    Returns:
        Number of steps executed

    Raises:
        BuildError: If a step is not executable or exits non-zero
    """
    steps = parse_build_script(script)
    if not steps:
        return 0

    prefix = f"[{label}] " if label else ""
    logger.info(f"{prefix}Running {script}")
    for index, step in enumerate(steps, start=1):
        logger.info(f"{prefix}Step {index}/{len(steps)}: {step}")
        try:
            # stdout/stderr are inherited so build output lands in the job log
            subprocess.run([step.command] + step.args, cwd=str(cwd), check=True)
        except FileNotFoundError as e:
            raise BuildError(f"{prefix}Command not found: {step.command}", code="NOT_FOUND") from e
        except PermissionError as e:
            raise BuildError(f"{prefix}Command not executable: {step.command}", code="NOT_EXECUTABLE") from e
        except subprocess.CalledProcessError as e:
            raise BuildError(
                f"{prefix}'{step}' failed with exit code {e.returncode}",
                returncode=e.returncode,
            ) from e
    return len(steps)
