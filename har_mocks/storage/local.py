"""
Local filesystem storage for pipeline artifacts.

Every write goes to a sibling temp file first and is then renamed over the
target, so readers see either the previous file or the new one, never a
partial write.
"""

from __future__ import annotations

import os
import pathlib
import tempfile


class LocalFileSystemStorage:
    """Local filesystem storage rooted at one directory."""

    def __init__(self, base_path: pathlib.Path, create: bool = False) -> None:
        """
        Initialize local filesystem storage.

        Args:
            base_path: Base directory for stored files
            create: Create the directory if it doesn't exist

        Raises:
            ValueError: If base_path doesn't exist (and create is False) or is not a directory
        """
        if create:
            base_path.mkdir(parents=True, exist_ok=True)

        if not base_path.exists():
            raise ValueError(f'Storage path does not exist: {base_path}. Please create it first.')

        if not base_path.is_dir():
            raise ValueError(f'Storage path is not a directory: {base_path}')

        self.base_path = base_path

    def path_for(self, filename: str) -> pathlib.Path:
        return self.base_path / filename

    def save(self, filename: str, data: bytes) -> pathlib.Path:
        """
        Atomically write a file.

        Returns:
            Absolute path to the saved file
        """
        target = self.path_for(filename)
        fd, tmp_name = tempfile.mkstemp(dir=self.base_path, prefix=f'.{filename}.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            pathlib.Path(tmp_name).unlink(missing_ok=True)
            raise
        return target.absolute()

    def list(self, suffix: str) -> list[pathlib.Path]:
        """Stored files ending with suffix, sorted by name."""
        return sorted(p for p in self.base_path.iterdir() if p.is_file() and p.name.endswith(suffix))
