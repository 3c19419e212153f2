# core/sync.py
import os
import shutil
from typing import Iterator, List, Tuple

from .models import FileOutcome

# Network shares report coarse modification times
MTIME_TOLERANCE_SECONDS = 2.0


def iter_files(source: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(absolute, relative)`` for every file under ``source``."""
    for dirpath, _dirnames, filenames in os.walk(source):
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            yield path, os.path.relpath(path, source)


def list_files(source: str) -> List[Tuple[str, str]]:
    return sorted(iter_files(source), key=lambda pair: pair[1])


def is_same_file(src: str, dst: str, tolerance: float = MTIME_TOLERANCE_SECONDS) -> bool:
    """Same byte length and modification times within ``tolerance``."""
    try:
        d = os.stat(dst)
    except FileNotFoundError:
        return False
    s = os.stat(src)
    return s.st_size == d.st_size and abs(s.st_mtime - d.st_mtime) <= tolerance


def sync_file(src: str, dst: str, tolerance: float = MTIME_TOLERANCE_SECONDS) -> FileOutcome:
    """
    Copy ``src`` over ``dst`` unless ``dst`` is already current.

    Raises OSError when the copy itself fails; callers count that as a
    failed file.
    """
    if is_same_file(src, dst, tolerance):
        return FileOutcome.SKIPPED
    # copy2 keeps the mtime so the next run can skip
    shutil.copy2(src, dst)
    return FileOutcome.COPIED


def percent(done: int, total: int) -> int:
    if total <= 0:
        return 100
    return (done * 100) // total
