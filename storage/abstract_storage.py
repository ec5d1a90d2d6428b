"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, BinaryIO


class AbstractStorage(ABC):
    """Interface for asset storage backends.

    Paths handed to and returned by a backend are relative, ``/``-separated
    strings rooted at the public asset root (for example ``uploads/1.jpg``).
    """

    @abstractmethod
    def save(self, file_obj: IO[bytes], filename: str, folder: str | None = None) -> str:
        """Persist a file and return the stored (relative) path."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return whether the given relative path exists in storage."""

    @abstractmethod
    def open(self, path: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file and return the file object."""

    @abstractmethod
    def resolve(self, path: str) -> Path:
        """Return the absolute location of a relative path."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove a stored file, raising ``FilesystemError`` on failure."""
