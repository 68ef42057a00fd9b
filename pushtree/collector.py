"""
collector.py

Responsibility: Collect the text files under a directory into `FileRecord`s.

Rules:
- Walk top-down (depth-first), pruning ignored directories before descending.
- Paths are relative to the root and always use forward slashes.
- Files that are not valid UTF-8 are skipped with a log notice; so are files
  that fail to read. Neither stops the walk.
- Results are sorted by relative path.

This module intentionally does NOT know about GitHub or the CLI.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from pushtree.ignore import IgnoreRule, should_ignore


class CollectError(RuntimeError):
    pass


@dataclass(frozen=True)
class FileRecord:
    path: str
    content: str


def _relative(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


def collect_files(
    root: str | Path,
    rules: Iterable[IgnoreRule],
    logger: logging.Logger,
) -> list[FileRecord]:
    """
    Return every non-ignored UTF-8 file under `root`.

    Ignore rules see the relative path of each entry, so a rule such as
    `node_modules` prunes the whole subtree at the directory itself.
    """
    base = Path(root).resolve()
    if not base.is_dir():
        raise CollectError(f"Source directory not found: {base}")
    rules = list(rules)
    records: list[FileRecord] = []

    def _unlistable(error: OSError) -> None:
        logger.warning("Skipping unreadable directory: %s (%s)", error.filename, error)

    for dirpath, dirnames, filenames in os.walk(base, onerror=_unlistable):
        current = Path(dirpath)
        # Prune in place so os.walk never descends into ignored directories.
        dirnames[:] = sorted(d for d in dirnames if not should_ignore(_relative(current / d, base), rules))

        for name in sorted(filenames):
            full = current / name
            rel = _relative(full, base)
            if should_ignore(rel, rules):
                continue
            try:
                raw = full.read_bytes()
            except OSError as e:
                logger.warning("Skipping unreadable file: %s (%s)", rel, e)
                continue
            try:
                content = raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.info("Skipping binary file: %s", rel)
                continue
            records.append(FileRecord(path=rel, content=content))

    records.sort(key=lambda r: r.path)
    return records
