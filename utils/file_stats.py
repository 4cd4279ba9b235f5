#!/usr/bin/env python3
"""File stat collection: glob expansion and per-file size metrics.

Every file is measured independently (size on disk, gzip size, brotli size) so
collection runs on a thread pool; the results are folded into a BranchStats
snapshot afterwards instead of being accumulated into shared counters.
"""

from __future__ import annotations

import glob
import gzip
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import brotli

from configs.config import Config
from utils.errors import FileDiffError
from utils.stats_models import BranchStats, FileMetric

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class CollectionError(FileDiffError):
    """Raised when globbing fails or a matched file cannot be measured."""

    def __init__(self, message: str, code: str = "COLLECTION"):
        super().__init__(message, code=code)


def split_patterns(dir_glob: str) -> List[str]:
    """Split the comma-separated dir_glob input into trimmed patterns."""
    if not dir_glob:
        return []
    return [p.strip() for p in dir_glob.split(",") if p.strip()]


def _match(pattern: str, root: Path) -> List[Path]:
    if os.path.isabs(pattern):
        raise CollectionError(f"Glob pattern must be relative to the repository root: {pattern}", code="GLOB")
    try:
        matches = glob.glob(pattern, root_dir=str(root), recursive=True)
    except (OSError, ValueError) as e:
        raise CollectionError(f"Failed to expand glob {pattern!r}: {e}", code="GLOB") from e
    paths = []
    for match in matches:
        path = Path(os.path.normpath(root / match))
        try:
            path.relative_to(root)
        except ValueError:
            raise CollectionError(f"Glob {pattern!r} matched {path}, outside the workspace {root}", code="GLOB")
        if path.is_dir():
            paths.extend(_files_under(path))
        else:
            paths.append(path)
    return paths


def _files_under(directory: Path) -> List[Path]:
    # Hidden entries below a matched directory are skipped, symlinked directories are not followed
    files = []
    try:
        for dirpath, dirnames, filenames in os.walk(directory, onerror=_raise_walk_error):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            files.extend(Path(dirpath) / name for name in filenames if not name.startswith("."))
    except OSError as e:
        raise CollectionError(f"Failed to list {directory}: {e}", code="GLOB") from e
    return files


def _raise_walk_error(error: OSError) -> None:
    raise error


def expand_globs(patterns: Iterable[str], cwd: PathLike) -> List[Path]:
    """Resolve glob patterns to an absolute, sorted, de-duplicated file list.

    Patterns are relative to `cwd`; '**' matches across directories. A pattern
    starting with '!' removes its matches from the result. A matched directory
    stands for every file below it, so `dist` selects the whole tree. Directories
    themselves are never returned, and hidden files only match when named
    explicitly.

    Raises:
        CollectionError: On absolute patterns, patterns escaping `cwd`, or OS errors
    """
    root = Path(cwd).resolve()
    included: set = set()
    excluded: set = set()
    for pattern in patterns:
        if pattern.startswith("!"):
            excluded.update(_match(pattern[1:], root))
        else:
            included.update(_match(pattern, root))
    return sorted(p for p in included - excluded if p.is_file())


def relative_key(path: PathLike, workspace: PathLike) -> str:
    """Key a file by its POSIX path relative to the branch workspace root."""
    file_path = Path(os.path.abspath(path))
    for root in (Path(os.path.abspath(workspace)), Path(workspace).resolve()):
        try:
            return file_path.relative_to(root).as_posix()
        except ValueError:
            continue
    raise CollectionError(f"{path} is not inside workspace {workspace}")


def gzip_size(data: bytes, level: Optional[int] = None) -> int:
    level = Config.GZIP_LEVEL if level is None else level
    # mtime=0 keeps the header, and thus the size, independent of wall-clock time
    return len(gzip.compress(data, compresslevel=level, mtime=0))


def brotli_size(data: bytes, quality: Optional[int] = None) -> int:
    quality = Config.BROTLI_QUALITY if quality is None else quality
    return len(brotli.compress(data, quality=quality))


def compute_file_metric(path: PathLike) -> FileMetric:
    """Measure one file: size on disk, gzip size and brotli size of its contents.

    Raises:
        CollectionError: If the file cannot be stat'ed or read
    """
    try:
        size = os.stat(path).st_size
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise CollectionError(f"Failed to read {path}: {e}", code="READ") from e
    return FileMetric(size=size, gzip_size=gzip_size(data), brotli_size=brotli_size(data))


def collect_file_stats(
    files: Iterable[PathLike],
    workspace: PathLike,
    *,
    max_workers: Optional[int] = None,
) -> BranchStats:
    """Measure `files` concurrently and fold them into a BranchStats snapshot.

    A single unreadable file fails the whole collection.
    """
    files = list(files)
    workers = max(1, max_workers or Config.MAX_WORKERS)

    def measure(path: PathLike) -> Tuple[str, FileMetric]:
        return relative_key(path, workspace), compute_file_metric(path)

    if not files:
        return BranchStats()
    with ThreadPoolExecutor(max_workers=min(workers, len(files))) as pool:
        results = list(pool.map(measure, files))
    return BranchStats.from_metrics(results)
