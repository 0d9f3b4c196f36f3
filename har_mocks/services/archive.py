"""
Archive store - reading and writing the HAR capture resource.

The archive is the durable source of truth; every other artifact is derived
from it. Reads are forgiving about absence (a missing archive is an empty
archive) but not about corruption (an unparsable archive stops the run).
Writes are atomic and serialized with a lock file next to the archive.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pydantic
from filelock import FileLock

from har_mocks.exceptions import ArchiveReadError
from har_mocks.schemas.har import HarArchive
from har_mocks.storage.local import LocalFileSystemStorage

__all__ = [
    'archive_lock',
    'dump_archive',
    'load_archive',
    'read_archive',
    'save_archive',
]

logger = logging.getLogger(__name__)


def archive_lock(path: Path) -> FileLock:
    """Cross-process lock guarding read-modify-write cycles on one archive."""
    return FileLock(path.with_name(path.name + '.lock'))


def read_archive(path: Path) -> HarArchive | None:
    """
    Parse an archive file.

    Returns:
        The archive, or None if the file doesn't exist

    Raises:
        ArchiveReadError: If the file exists but isn't a readable HAR document
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ArchiveReadError(path, str(e)) from e

    try:
        return HarArchive.model_validate_json(raw)
    except pydantic.ValidationError as e:
        raise ArchiveReadError(path, f'{e.error_count()} validation error(s): {e.errors()[0]["msg"]}') from e


def load_archive(path: Path) -> HarArchive:
    """Parse an archive file, treating a missing file as an empty archive."""
    archive = read_archive(path)
    if archive is None:
        logger.debug('Archive %s not found, using empty archive', path)
        return HarArchive.empty()
    return archive


def dump_archive(archive: HarArchive) -> bytes:
    """Serialize an archive the way recorders write it (2-space indented JSON)."""
    data = archive.model_dump(mode='json', by_alias=True, exclude_unset=True)
    return json.dumps(data, indent=2, ensure_ascii=False).encode('utf-8')


def save_archive(archive: HarArchive, path: Path) -> Path:
    """
    Atomically write an archive.

    Callers performing read-merge-write should hold archive_lock(path) for the
    whole cycle; this function only guarantees the write itself is atomic.
    """
    storage = LocalFileSystemStorage(path.parent, create=True)
    return storage.save(path.name, dump_archive(archive))
