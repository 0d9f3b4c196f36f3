"""Storage backends for archives and mock artifacts."""

from har_mocks.storage.local import LocalFileSystemStorage

__all__ = ['LocalFileSystemStorage']
