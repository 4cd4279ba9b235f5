from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from utils.stats_models import BranchStats, FileMetric


def metric(size: int, gzip_size: int | None = None, brotli_size: int | None = None) -> FileMetric:
    return FileMetric(
        size=size,
        gzip_size=size // 2 if gzip_size is None else gzip_size,
        brotli_size=size // 3 if brotli_size is None else brotli_size,
    )


def stats(files: dict[str, FileMetric]) -> BranchStats:
    return BranchStats.from_metrics(files.items())


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def _write(root: Path, rel: str, content: bytes) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def git_checkout(tmp_path: Path) -> Path:
    """A clone of an 'origin' repo with branches main and feature.

    main:    dist/x.js (100 bytes)
    feature: dist/x.js (150 bytes), dist/y.js (50 bytes)
    """
    origin = tmp_path / "origin"
    origin.mkdir()
    _git(origin, "init", "-q")
    _git(origin, "config", "user.name", "Test User")
    _git(origin, "config", "user.email", "test@example.com")
    _git(origin, "config", "commit.gpgsign", "false")

    _write(origin, "dist/x.js", b"a" * 100)
    _write(origin, "README.md", b"readme\n")
    _git(origin, "add", "-A")
    _git(origin, "commit", "-q", "-m", "base")
    _git(origin, "branch", "-M", "main")

    _git(origin, "checkout", "-q", "-b", "feature")
    _write(origin, "dist/x.js", b"b" * 150)
    _write(origin, "dist/y.js", b"c" * 50)
    _git(origin, "add", "-A")
    _git(origin, "commit", "-q", "-m", "feature")
    _git(origin, "checkout", "-q", "main")

    checkout = tmp_path / "checkout"
    _git(tmp_path, "clone", "-q", str(origin), str(checkout))
    return checkout
