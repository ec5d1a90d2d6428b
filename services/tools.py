"""Tool listing queries and the owner-only delete workflow."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.tool import Tool, ToolImage
from models.user import User
from storage.abstract_storage import AbstractStorage
from storage.assets import VARIANT_KINDS, AssetCache, variant_path
from utils.errors import FilesystemError, ForbiddenError, NotFoundError, StoreError

logger = logging.getLogger(__name__)


def _like_pattern(text: str) -> str:
    escaped = text.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ToolService:
    """Assemble tool collections and details enriched with image variants.

    Writes are issued as separate statements: the tool row is committed before
    its images, and on delete the files are removed before the row. A failure
    between steps leaves the earlier step in place.
    """

    def __init__(self, session: Session, storage: AbstractStorage, assets: AssetCache):
        self.session = session
        self.storage = storage
        self.assets = assets

    @contextmanager
    def _store(self) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Database operation failed")
            raise StoreError() from exc

    def _summaries(self, *criteria) -> list[dict]:
        first_image = (
            self.session.query(
                ToolImage.tool_id.label("tool_id"),
                func.min(ToolImage.id).label("image_id"),
            )
            .group_by(ToolImage.tool_id)
            .subquery()
        )
        query = (
            self.session.query(Tool, ToolImage.image_path)
            .outerjoin(first_image, first_image.c.tool_id == Tool.id)
            .outerjoin(ToolImage, ToolImage.id == first_image.c.image_id)
            .filter(*criteria)
        )
        with self._store():
            rows = query.all()

        results = []
        for tool, image_path in rows:
            data = tool.to_dict()
            data["image_path"] = image_path
            data["thumbnail_path"] = self.assets.thumbnail(image_path) if image_path else None
            results.append(data)
        return results

    def search(self, text: str | None) -> list[dict]:
        """Return tools whose title or description contains ``text``, ignoring case."""

        pattern = _like_pattern(text or "")
        return self._summaries(
            or_(
                func.lower(Tool.title).like(pattern, escape="\\"),
                func.lower(func.coalesce(Tool.description, "")).like(pattern, escape="\\"),
            )
        )

    def tools_for_user(self, user_id: int) -> list[dict]:
        """Return every tool owned by ``user_id``."""

        with self._store():
            user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return self._summaries(Tool.user_id == user_id)

    def _get_tool(self, tool_id: int) -> Tool:
        with self._store():
            tool = self.session.get(Tool, tool_id)
        if tool is None:
            raise NotFoundError("Tool not found.")
        return tool

    def detail(self, tool_id: int) -> dict:
        """Return a tool with all of its images and their preview variants."""

        tool = self._get_tool(tool_id)
        with self._store():
            images = list(tool.images)

        data = tool.to_dict()
        data["images"] = [
            {
                "id": image.id,
                "image_path": image.image_path,
                "preview_path": self.assets.preview(image.image_path),
            }
            for image in images
        ]
        return data

    def create(
        self,
        owner_id: int,
        title: str,
        description: str | None,
        location: str | None,
        manual_path: str | None,
        image_paths: Iterable[str],
    ) -> int:
        """Insert a tool, warm its thumbnails, then insert its images in one batch.

        Every image is decoded before the tool row is written, so an unreadable
        upload never leaves a tool behind.
        """

        image_paths = list(image_paths)
        for path in image_paths:
            self.assets.verify(path)

        tool = Tool(
            title=title,
            description=description,
            location=location,
            user_manual_path=manual_path,
            user_id=owner_id,
        )
        with self._store():
            self.session.add(tool)
            self.session.commit()
        tool_id = tool.id

        for path in image_paths:
            self.assets.thumbnail(path)

        if image_paths:
            with self._store():
                self.session.add_all(
                    [ToolImage(tool_id=tool_id, image_path=path) for path in image_paths]
                )
                self.session.commit()

        logger.info("Tool %s created by user %s with %d image(s)", tool_id, owner_id, len(image_paths))
        return tool_id

    def _discard(self, path: str, label: str) -> None:
        try:
            self.storage.delete(path)
        except (FilesystemError, NotFoundError) as exc:
            logger.warning("%s file not found or could not be deleted: %s", label, exc.description)

    def discard_files(self, manual_path: str | None, image_paths: Iterable[str]) -> None:
        """Best-effort removal of a manual, image originals, and their variants."""

        if manual_path:
            self._discard(manual_path, "Manual")
        for path in image_paths:
            self._discard(path, "Image")
            for kind in VARIANT_KINDS:
                if self.storage.exists(variant_path(path, kind)):
                    self._discard(variant_path(path, kind), "Image variant")

    def delete(self, tool_id: int, requester_id: int) -> None:
        """Delete a tool owned by ``requester_id`` along with its files."""

        tool = self._get_tool(tool_id)
        if tool.user_id != requester_id:
            raise ForbiddenError("Unauthorized to delete this tool.")

        with self._store():
            image_paths = [image.image_path for image in tool.images]
        self.discard_files(tool.user_manual_path, image_paths)

        with self._store():
            self.session.delete(tool)
            self.session.commit()
        logger.info("Tool %s deleted by user %s", tool_id, requester_id)
