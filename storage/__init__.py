"""Storage backends and the derived asset cache."""

from .abstract_storage import AbstractStorage
from .assets import PREVIEW, THUMBNAIL, AssetCache, render_variant, variant_path, verify_image
from .local_storage import LocalStorage

__all__ = [
    "AbstractStorage",
    "LocalStorage",
    "AssetCache",
    "render_variant",
    "verify_image",
    "variant_path",
    "THUMBNAIL",
    "PREVIEW",
]
