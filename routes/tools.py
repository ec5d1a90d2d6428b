"""Tools blueprint: search, detail, upload, and owner-only delete."""

from __future__ import annotations

import secrets
import time
from http import HTTPStatus
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request
from werkzeug.datastructures import FileStorage

from models import db
from models.user import User
from services.tools import ToolService
from storage.assets import AssetCache
from storage.local_storage import LocalStorage
from utils.errors import AssetGenerationError, UnauthorizedError, ValidationError
from utils.request_validation import normalize_extensions
from utils.session import require_identity

tools_bp = Blueprint("tools", __name__)

IMAGE_EXTENSIONS_DEFAULT = {"jpg", "jpeg", "png", "webp", "gif"}
MANUAL_EXTENSIONS_DEFAULT = {"pdf", "txt", "doc", "docx"}
MAX_MANUALS = 1


def _tool_service() -> ToolService:
    storage = LocalStorage(current_app.config.get("ASSET_ROOT"))
    return ToolService(db.session, storage, AssetCache(storage))


def _uploaded_files(field: str) -> list[FileStorage]:
    return [
        file
        for file in request.files.getlist(field)
        if isinstance(file, FileStorage) and (file.filename or "").strip()
    ]


def _check_extension(file: FileStorage, allowed: set[str], label: str) -> str:
    suffix = Path(file.filename or "").suffix.lower()
    if suffix.lstrip(".") not in allowed:
        allowed_text = ", ".join(sorted(allowed))
        raise ValidationError(f"{label} type not allowed. Allowed types: {allowed_text}.")
    return suffix


def _stored_filename(suffix: str) -> str:
    """Timestamp-based name that carries nothing from the client's filename."""

    return f"{int(time.time() * 1000)}{secrets.token_hex(4)}{suffix}"


@tools_bp.route("/search", methods=["GET"])
def search_tools():
    """Return tools matching ``query`` in title or description; empty matches all."""

    query = request.args.get("query", request.args.get("q", ""))
    results = _tool_service().search(query)
    return jsonify({"results": results, "count": len(results), "query": query})


@tools_bp.route("/user/<int:user_id>", methods=["GET"])
def user_tools(user_id: int):
    results = _tool_service().tools_for_user(user_id)
    return jsonify({"results": results, "count": len(results)})


@tools_bp.route("/<int:tool_id>", methods=["GET"])
def get_tool(tool_id: int):
    return jsonify(_tool_service().detail(tool_id))


@tools_bp.route("/upload", methods=["POST"])
def upload_tool():
    """Store uploaded originals and create a tool owned by the signed-in user."""

    identity = require_identity()
    if db.session.get(User, identity) is None:
        raise UnauthorizedError("Session user no longer exists.")

    title = (request.form.get("title") or "").strip()
    if not title:
        raise ValidationError("title is required")
    description = (request.form.get("description") or "").strip() or None
    location = (request.form.get("location") or "").strip() or None

    images = _uploaded_files("images")
    manuals = _uploaded_files("manual")
    max_images = int(current_app.config.get("MAX_TOOL_IMAGES", 5))
    if len(images) > max_images:
        raise ValidationError(f"At most {max_images} images may be uploaded.")
    if len(manuals) > MAX_MANUALS:
        raise ValidationError("At most one manual may be uploaded.")

    image_types = normalize_extensions(
        current_app.config.get("ALLOWED_IMAGE_TYPES"), IMAGE_EXTENSIONS_DEFAULT
    )
    manual_types = normalize_extensions(
        current_app.config.get("ALLOWED_MANUAL_TYPES"), MANUAL_EXTENSIONS_DEFAULT
    )
    image_suffixes = [_check_extension(file, image_types, "Image") for file in images]
    manual_suffixes = [_check_extension(file, manual_types, "Manual") for file in manuals]

    service = _tool_service()
    folder = current_app.config.get("UPLOAD_FOLDER", "uploads")

    manual_path = None
    for file, suffix in zip(manuals, manual_suffixes):
        manual_path = service.storage.save(file, _stored_filename(suffix), folder=folder)

    image_paths = [
        service.storage.save(file, _stored_filename(suffix), folder=folder)
        for file, suffix in zip(images, image_suffixes)
    ]

    try:
        tool_id = service.create(
            owner_id=identity,
            title=title,
            description=description,
            location=location,
            manual_path=manual_path,
            image_paths=image_paths,
        )
    except AssetGenerationError:
        service.discard_files(manual_path, image_paths)
        raise
    return jsonify({"id": tool_id}), HTTPStatus.CREATED


@tools_bp.route("/<int:tool_id>", methods=["DELETE"])
def delete_tool(tool_id: int):
    identity = require_identity()
    _tool_service().delete(tool_id, identity)
    return jsonify({"ok": True})
