"""Serve uploaded originals and their derived variants from the asset root."""

from __future__ import annotations

from pathlib import Path

from flask import Blueprint, current_app, send_from_directory

media_bp = Blueprint("media", __name__)


@media_bp.route("/<path:filename>", methods=["GET"])
def serve_asset(filename: str):
    root = Path(current_app.config["ASSET_ROOT"]).resolve()
    return send_from_directory(root, filename)
