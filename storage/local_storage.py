"""Local filesystem storage implementation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, BinaryIO

from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

from config import Config
from utils.errors import FilesystemError, NotFoundError

from .abstract_storage import AbstractStorage


class LocalStorage(AbstractStorage):
    """Persist files to the local filesystem under the public asset root."""

    def __init__(self, root_dir: str | None = None):
        self.base_directory = Path(root_dir or Config.ASSET_ROOT)
        os.makedirs(self.base_directory, exist_ok=True)

    def save(self, file_obj: IO[bytes], filename: str, folder: str | None = None) -> str:
        """Save a file and return its path relative to the asset root."""

        safe_name = secure_filename(filename)
        if not safe_name:
            raise ValueError("Filename must contain at least one valid character.")

        relative = f"{folder.strip('/')}/{safe_name}" if folder else safe_name
        destination = self.resolve(relative)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if hasattr(file_obj, "save"):
                file_obj.save(destination)  # type: ignore[arg-type]
            else:
                with open(destination, "wb") as output:
                    output.write(file_obj.read())
        except OSError as exc:
            raise FilesystemError(f"Unable to store {relative}.") from exc

        return relative

    def exists(self, path: str) -> bool:
        """Return True if the given relative path is a file under the asset root."""

        return self.resolve(path).is_file()

    def open(self, path: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file using the provided mode."""

        try:
            return open(self.resolve(path), mode)
        except OSError as exc:
            raise FilesystemError(f"Unable to open {path}.") from exc

    def resolve(self, path: str) -> Path:
        """Join ``path`` onto the asset root, refusing paths that escape it."""

        joined = safe_join(str(self.base_directory), path)
        if joined is None:
            raise NotFoundError("Invalid asset path.")
        return Path(joined)

    def delete(self, path: str) -> None:
        """Remove a stored file."""

        try:
            os.remove(self.resolve(path))
        except OSError as exc:
            raise FilesystemError(f"Unable to delete {path}: {exc.strerror or exc}") from exc
