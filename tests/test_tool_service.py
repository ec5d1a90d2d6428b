"""Tests for tool search, detail assembly, creation, and owner-only delete."""

from __future__ import annotations

from io import BytesIO

import pytest

from conftest import create_user, image_bytes
from models import db
from models.tool import Tool, ToolImage
from utils.errors import AssetGenerationError, ForbiddenError, NotFoundError


def _store_image(storage, name: str, size=(640, 480)) -> str:
    return storage.save(BytesIO(image_bytes(size)), name, folder="uploads")


def _make_tool(service, storage, owner_id: int, title: str, *, description=None, images=()):
    paths = [_store_image(storage, name) for name in images]
    return service.create(owner_id, title, description, "Berlin", None, paths)


def test_search_empty_text_returns_every_tool(service, storage):
    owner = create_user("owner@example.com")
    ids = {
        _make_tool(service, storage, owner.id, "Drill", images=["a.jpg"]),
        _make_tool(service, storage, owner.id, "Ladder"),
        _make_tool(service, storage, owner.id, "Saw", description="Cordless circular saw"),
    }

    assert {tool["id"] for tool in service.search("")} == ids
    assert {tool["id"] for tool in service.search(None)} == ids


def test_search_without_match_is_empty(service, storage):
    owner = create_user("owner@example.com")
    _make_tool(service, storage, owner.id, "Drill")

    assert service.search("xyz-no-match") == []


def test_search_is_case_insensitive_over_title_and_description(service, storage):
    owner = create_user("owner@example.com")
    drill = _make_tool(service, storage, owner.id, "Hammer Drill")
    saw = _make_tool(service, storage, owner.id, "Saw", description="Great for DRILLING holes? No.")
    _make_tool(service, storage, owner.id, "Ladder")

    assert {tool["id"] for tool in service.search("drill")} == {drill, saw}


def test_search_treats_wildcards_literally(service, storage):
    owner = create_user("owner@example.com")
    _make_tool(service, storage, owner.id, "Drill")
    discounted = _make_tool(service, storage, owner.id, "Saw 50% off")

    assert [tool["id"] for tool in service.search("%")] == [discounted]


def test_search_annotates_lowest_id_image_with_thumbnail(service, storage):
    owner = create_user("owner@example.com")
    with_images = _make_tool(service, storage, owner.id, "Drill", images=["first.jpg", "second.jpg"])
    without_images = _make_tool(service, storage, owner.id, "Ladder")

    results = {tool["id"]: tool for tool in service.search("")}

    assert results[with_images]["image_path"] == "uploads/first.jpg"
    assert results[with_images]["thumbnail_path"] == "uploads/first_thumb.jpg"
    assert storage.exists("uploads/first_thumb.jpg")
    assert results[without_images]["image_path"] is None
    assert results[without_images]["thumbnail_path"] is None


def test_create_prewarms_thumbnails_and_keeps_image_order(service, storage):
    owner = create_user("owner@example.com")
    tool_id = _make_tool(service, storage, owner.id, "Drill", images=["b.jpg", "a.jpg"])

    assert storage.exists("uploads/b_thumb.jpg")
    assert storage.exists("uploads/a_thumb.jpg")
    images = ToolImage.query.filter_by(tool_id=tool_id).order_by(ToolImage.id).all()
    assert [image.image_path for image in images] == ["uploads/b.jpg", "uploads/a.jpg"]


def test_tools_for_user_filters_by_owner(service, storage):
    alice = create_user("alice@example.com")
    bob = create_user("bob@example.com")
    mine = _make_tool(service, storage, alice.id, "Drill", images=["a.jpg"])
    _make_tool(service, storage, bob.id, "Saw")

    results = service.tools_for_user(alice.id)

    assert [tool["id"] for tool in results] == [mine]
    assert results[0]["thumbnail_path"] == "uploads/a_thumb.jpg"


def test_tools_for_unknown_user_raises_not_found(service):
    with pytest.raises(NotFoundError):
        service.tools_for_user(999)


def test_detail_of_missing_tool_raises_not_found(service):
    with pytest.raises(NotFoundError):
        service.detail(12345)


def test_detail_returns_only_its_images_with_previews(service, storage):
    owner = create_user("owner@example.com")
    tool_id = _make_tool(service, storage, owner.id, "Drill", images=["a.jpg", "b.jpg"])
    _make_tool(service, storage, owner.id, "Saw", images=["c.jpg"])

    detail = service.detail(tool_id)

    assert detail["title"] == "Drill"
    assert [image["image_path"] for image in detail["images"]] == ["uploads/a.jpg", "uploads/b.jpg"]
    for image in detail["images"]:
        assert image["preview_path"]
        assert storage.exists(image["preview_path"])


def test_delete_by_non_owner_is_forbidden_and_changes_nothing(service, storage):
    owner = create_user("owner@example.com")
    intruder = create_user("intruder@example.com")
    tool_id = _make_tool(service, storage, owner.id, "Drill", images=["a.jpg"])

    with pytest.raises(ForbiddenError):
        service.delete(tool_id, intruder.id)

    assert db.session.get(Tool, tool_id) is not None
    assert ToolImage.query.filter_by(tool_id=tool_id).count() == 1
    assert storage.exists("uploads/a.jpg")
    assert storage.exists("uploads/a_thumb.jpg")


def test_delete_missing_tool_raises_not_found(service):
    owner = create_user("owner@example.com")
    with pytest.raises(NotFoundError):
        service.delete(404, owner.id)


def test_delete_by_owner_removes_rows_and_files(service, storage):
    owner = create_user("owner@example.com")
    manual = storage.save(BytesIO(b"%PDF-1.4"), "manual.pdf", folder="uploads")
    paths = [_store_image(storage, "a.jpg"), _store_image(storage, "b.jpg")]
    tool_id = service.create(owner.id, "Drill", None, None, manual, paths)
    service.detail(tool_id)
    assert storage.exists("uploads/a_preview.jpg")

    service.delete(tool_id, owner.id)

    db.session.expire_all()
    assert db.session.get(Tool, tool_id) is None
    assert ToolImage.query.filter_by(tool_id=tool_id).count() == 0
    for path in (
        "uploads/manual.pdf",
        "uploads/a.jpg",
        "uploads/a_thumb.jpg",
        "uploads/a_preview.jpg",
        "uploads/b.jpg",
        "uploads/b_thumb.jpg",
    ):
        assert not storage.exists(path)


def test_delete_succeeds_when_files_are_already_gone(service, storage, caplog):
    owner = create_user("owner@example.com")
    tool_id = service.create(
        owner.id, "Drill", None, None, "uploads/never-uploaded.pdf", [_store_image(storage, "a.jpg")]
    )
    storage.delete("uploads/a.jpg")
    storage.delete("uploads/a_thumb.jpg")

    with caplog.at_level("WARNING"):
        service.delete(tool_id, owner.id)

    assert db.session.get(Tool, tool_id) is None
    assert "could not be deleted" in caplog.text


def test_create_with_undecodable_image_writes_no_tool(service, storage):
    owner = create_user("owner@example.com")
    good = _store_image(storage, "good.jpg")
    broken = storage.save(BytesIO(b"not an image"), "broken.jpg", folder="uploads")

    with pytest.raises(AssetGenerationError):
        service.create(owner.id, "Drill", None, None, None, [good, broken])

    assert Tool.query.count() == 0
    assert not storage.exists("uploads/good_thumb.jpg")


def test_discard_files_removes_originals_variants_and_manual(service, storage):
    manual = storage.save(BytesIO(b"%PDF-1.4"), "manual.pdf", folder="uploads")
    image = _store_image(storage, "a.jpg")
    service.assets.thumbnail(image)

    service.discard_files(manual, [image])

    assert list(storage.resolve("uploads").iterdir()) == []
