"""
Archive merge - reconcile a fresh recording session with the stored archive.

Three-way reconciliation keyed by operation name:
- update:   operation re-captured in the new session replaces its old entry
            in place (this is how schema drift is captured)
- preserve: operation only in the existing archive is copied unchanged
- add:      operation only in the new session is appended, in new-session order

Entries without a recognizable operation name are copied through. The merge
never duplicates an operation name it touched. An operation that vanished from
the new session is silently preserved even if it was retired upstream; the
drift validator is what reports that case.
"""

from __future__ import annotations

from pathlib import Path

from har_mocks.protocols import LoggerProtocol, NullLogger
from har_mocks.schemas.har import HarArchive, HarEntry
from har_mocks.schemas.operations import MergeResult
from har_mocks.services.archive import archive_lock, load_archive, read_archive, save_archive
from har_mocks.services.extractor import extract_operation_entries, operation_name_for

__all__ = [
    'ArchiveMergeService',
    'merge_archives',
]


def merge_archives(existing: HarArchive, new: HarArchive | None) -> MergeResult:
    """
    Merge a new capture into an existing archive.

    Deterministic and order-preserving. The existing archive object is never
    modified; the merged archive keeps its HAR envelope (version, creator, pages).

    Args:
        existing: Stored archive (system of record)
        new: Freshly captured archive, or None if nothing was captured

    Returns:
        MergeResult with status 'no_new_archive' (new is None),
        'no_operations' (new had no user operations) or 'merged'
    """
    if new is None:
        return MergeResult(status='no_new_archive', archive=existing)

    # First occurrence wins when the new session itself repeats an operation
    captured = extract_operation_entries(new)
    if not captured:
        return MergeResult(status='no_operations', archive=existing)

    merged: list[HarEntry] = []
    consumed: set[str] = set()

    for entry in existing.entries:
        name = operation_name_for(entry)
        if name is None or name not in captured:
            merged.append(entry)
            continue

        if name in consumed:
            # Older retry of an operation already replaced above
            continue

        merged.append(captured[name])
        consumed.add(name)

    added = [name for name in captured if name not in consumed]
    updated = [name for name in captured if name in consumed]
    merged.extend(captured[name] for name in added)

    return MergeResult(
        status='merged',
        archive=existing.with_entries(merged),
        added=added,
        updated=updated,
    )


class ArchiveMergeService:
    """File-level merge of a recording session (<archive>.new) into the stored archive."""

    def __init__(self, logger: LoggerProtocol | None = None) -> None:
        self.logger = logger or NullLogger()

    async def merge_files(self, existing_path: Path, new_path: Path) -> MergeResult:
        """
        Merge new_path into existing_path.

        A missing existing archive is treated as empty. On a successful merge
        the merged archive is written atomically and new_path is deleted.

        Raises:
            ArchiveReadError: If either file exists but can't be parsed
        """
        await self.logger.info('Merging new operations with existing HAR...')

        existing_path.parent.mkdir(parents=True, exist_ok=True)
        with archive_lock(existing_path):
            new = read_archive(new_path)
            existing = load_archive(existing_path)
            result = merge_archives(existing, new)

            if result.status == 'no_new_archive':
                await self.logger.warning(f'No new HAR file at {new_path} - no operations were recorded')
                return result

            if result.status == 'no_operations':
                await self.logger.warning(f'{new_path} contains no GraphQL operations - nothing to merge')
                return result

            save_archive(result.archive, existing_path)

        new_path.unlink(missing_ok=True)
        await self.logger.info(f'Cleaned up temporary HAR file {new_path.name}')

        await self.logger.info(f'HAR file updated: {existing_path} ({len(result.archive.entries)} entries)')
        if result.added:
            await self.logger.info(f'Added {len(result.added)} NEW operation(s): {", ".join(result.added)}')
        if result.updated:
            await self.logger.info(f'Updated {len(result.updated)} EXISTING operation(s): {", ".join(result.updated)}')
        return result
