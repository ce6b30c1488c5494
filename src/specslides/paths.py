from __future__ import annotations

import os
from pathlib import Path

from .errors import InvalidInputError, NotFoundError, ScanError
from .logging import get_logger

logger = get_logger(__name__)

SESSION_SUFFIX = ".jsonl"


def resolve_input(path: str | Path) -> Path:
    """Resolve a session file or a directory of session files to one file.

    Directories are walked recursively and the most recently modified
    ``.jsonl`` file wins. Symlinks are compared by their own modification
    time and are not followed, so a dangling link does not abort the scan.
    Equal modification times fall back to the lexicographically greatest path.
    """
    input_path = Path(path)
    try:
        is_dir = input_path.is_dir()
        exists = is_dir or input_path.exists()
    except OSError as e:
        raise NotFoundError(f"input not found: {e}") from e
    if not exists:
        raise NotFoundError(f"input not found: {input_path}")

    if is_dir:
        resolved = find_latest_session_file(input_path)
        logger.debug("input.resolved", input=str(input_path), path=str(resolved))
        return resolved

    if input_path.suffix != SESSION_SUFFIX:
        raise InvalidInputError("expected a Codex session .jsonl file")
    return input_path


def _raise_scan_error(exc: OSError) -> None:
    raise ScanError(f"scan input directory: {exc}") from exc


def find_latest_session_file(root: Path) -> Path:
    candidates: list[tuple[int, str, Path]] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_scan_error):
        for name in filenames:
            if Path(name).suffix != SESSION_SUFFIX:
                continue
            candidate = Path(dirpath) / name
            try:
                mtime_ns = candidate.lstat().st_mtime_ns
            except OSError as e:
                raise ScanError(f"scan input directory: {e}") from e
            candidates.append((mtime_ns, str(candidate), candidate))

    if not candidates:
        raise NotFoundError("no .jsonl session files found in input directory")

    _, _, latest = max(candidates, key=lambda item: (item[0], item[1]))
    return latest
