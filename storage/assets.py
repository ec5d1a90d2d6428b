"""Derived image variants (thumbnails and previews) cached on disk.

A variant lives beside its original, named by inserting ``_<kind>`` before the
extension: ``uploads/17.jpg`` -> ``uploads/17_thumb.jpg``. A variant file that
exists is served as-is forever; it is only generated when absent. Two requests
racing on the same missing variant may both render it, and the last rename
wins with identical content.

An original whose base name already ends in ``_thumb`` or ``_preview`` can
collide with the variant name of another original (``a_thumb.jpg`` vs the
thumbnail of ``a.jpg``). Upload names are timestamp-based, so this never
happens for ingested files.
"""

from __future__ import annotations

import logging
import os
import posixpath
import uuid
from pathlib import Path
from typing import Callable

from PIL import Image, ImageOps

from utils.errors import AssetGenerationError, FilesystemError

from .abstract_storage import AbstractStorage

logger = logging.getLogger(__name__)

THUMBNAIL = "thumb"
PREVIEW = "preview"
VARIANT_KINDS = (THUMBNAIL, PREVIEW)

THUMBNAIL_SIZE = (200, 200)
PREVIEW_MAX_HEIGHT = 300
VARIANT_QUALITY = 80

Generator = Callable[[Path, Path, str], None]


def variant_path(original: str, kind: str) -> str:
    """Return the relative path of the ``kind`` variant of ``original``."""

    if kind not in VARIANT_KINDS:
        raise ValueError(f"Unknown variant kind: {kind!r}")
    directory, filename = posixpath.split(original)
    base, ext = posixpath.splitext(filename)
    return posixpath.join(directory, f"{base}_{kind}{ext}")


def _fit_thumbnail(image: Image.Image) -> Image.Image:
    return ImageOps.fit(image, THUMBNAIL_SIZE, method=Image.Resampling.LANCZOS)


def _fit_preview(image: Image.Image) -> Image.Image:
    width, height = image.size
    if height <= PREVIEW_MAX_HEIGHT:
        return image.copy()
    new_width = max(1, round(width * PREVIEW_MAX_HEIGHT / height))
    return image.resize((new_width, PREVIEW_MAX_HEIGHT), Image.Resampling.LANCZOS)


_TRANSFORMS = {
    THUMBNAIL: _fit_thumbnail,
    PREVIEW: _fit_preview,
}


def verify_image(source: Path) -> None:
    """Raise ``AssetGenerationError`` unless ``source`` decodes as an image."""

    try:
        with Image.open(source) as image:
            image.verify()
    except FileNotFoundError as exc:
        raise AssetGenerationError(f"Original image {source.name} is missing.") from exc
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise AssetGenerationError(f"Unable to process image {source.name}.") from exc


def render_variant(source: Path, destination: Path, kind: str) -> None:
    """Render the ``kind`` variant of ``source`` into ``destination``.

    The output is written to a temporary sibling and renamed into place, so a
    concurrent reader never observes a half-written variant. Decode failures
    raise ``AssetGenerationError``; write failures raise ``FilesystemError``.
    """

    image_format = Image.registered_extensions().get(destination.suffix.lower())
    if image_format is None:
        raise AssetGenerationError(f"Unsupported image type: {destination.suffix or 'none'}.")

    try:
        with Image.open(source) as original:
            image = ImageOps.exif_transpose(original)
            rendered = _TRANSFORMS[kind](image)
    except FileNotFoundError as exc:
        raise AssetGenerationError(f"Original image {source.name} is missing.") from exc
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise AssetGenerationError(f"Unable to process image {source.name}.") from exc

    if image_format == "JPEG" and rendered.mode not in ("RGB", "L"):
        rendered = rendered.convert("RGB")

    partial = destination.with_name(f".{destination.name}.{uuid.uuid4().hex}.part")
    try:
        rendered.save(partial, format=image_format, quality=VARIANT_QUALITY)
        os.replace(partial, destination)
    except OSError as exc:
        raise FilesystemError(f"Unable to write {destination.name}.") from exc
    finally:
        if partial.exists():
            partial.unlink()


class AssetCache:
    """Serve image variants from storage, generating them on first access."""

    def __init__(self, storage: AbstractStorage, generator: Generator | None = None):
        self.storage = storage
        self.generator = generator or render_variant

    def ensure(self, original: str, kind: str) -> str:
        """Return the variant path for ``original``, generating it if missing."""

        target = variant_path(original, kind)
        if self.storage.exists(target):
            return target

        logger.debug("Generating %s variant for %s", kind, original)
        self.generator(self.storage.resolve(original), self.storage.resolve(target), kind)
        return target

    def thumbnail(self, original: str) -> str:
        return self.ensure(original, THUMBNAIL)

    def preview(self, original: str) -> str:
        return self.ensure(original, PREVIEW)

    def verify(self, original: str) -> None:
        """Check that ``original`` decodes before anything refers to it."""

        verify_image(self.storage.resolve(original))
