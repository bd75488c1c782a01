"""Tests for BookmarkService against the in-memory backend."""

import pytest

from webmarker.domain.exceptions import NotFound, ValidationFailure
from webmarker.domain.models import Bookmark, PageContext
from webmarker.services import OperationStatus
from webmarker.store.state import find_bookmark

URL = "https://example.com/article"


def _seed_bookmark(backend, bookmark_id="b1", url=URL, tags=()):
    backend.seed(
        "bookmarks",
        {"id": bookmark_id, "url": url, "title": "Article", "isStarred": False, "tags": list(tags)},
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_bookmarks_seeds_store(container, backend):
    _seed_bookmark(backend, "b1")
    _seed_bookmark(backend, "b2", url="https://other.test")

    bookmarks = await container.bookmark_service.get_bookmarks()

    state = container.store.get_state()
    assert [b.id for b in bookmarks] == ["b1", "b2"]
    assert [b.id for b in state.bookmarks] == ["b1", "b2"]
    assert state.last_action == "INIT_BOOKMARKS"


@pytest.mark.asyncio
async def test_get_bookmark_for_url(container, backend):
    _seed_bookmark(backend, "b1", tags=["python"])

    bookmark = await container.bookmark_service.get_bookmark_for_url(URL)

    assert bookmark.id == "b1"
    assert bookmark.tag_names == ["python"]
    request = backend.calls("GET", "/bookmarks/url")[0]
    assert request.url.params["url"] == URL


@pytest.mark.asyncio
async def test_get_bookmark_for_unknown_url_raises_not_found(container):
    with pytest.raises(NotFound):
        await container.bookmark_service.get_bookmark_for_url("https://nowhere.test")


@pytest.mark.asyncio
async def test_get_bookmark_by_id_missing_raises_not_found(container):
    with pytest.raises(NotFound):
        await container.bookmark_service.get_bookmark_by_id("missing")


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_bookmark_round_trip(container, backend):
    service = container.bookmark_service
    bookmark = service.create_new_bookmark(True, PageContext(url=URL, title="Article"))

    created = await service.create_bookmark(bookmark.with_tags(["python"]))

    assert created is not None
    assert created.id == bookmark.id
    assert backend.resources["bookmarks"][bookmark.id]["isStarred"] is True
    stored = find_bookmark(container.store.get_state(), bookmark.id)
    assert stored is not None
    assert stored.tag_names == ["python"]
    assert container.ledger.latest("bookmark", bookmark.id).status is OperationStatus.COMMITTED


@pytest.mark.asyncio
async def test_new_starred_bookmark_can_be_fetched_by_id(container):
    service = container.bookmark_service
    service.set_current_page(PageContext(url="https://x", title="X"))
    bookmark = service.create_new_bookmark(True)

    await service.create_bookmark(bookmark)
    fetched = await service.get_bookmark_by_id(bookmark.id)

    assert fetched.id == bookmark.id
    assert fetched.url == "https://x"
    assert fetched.is_starred is True


@pytest.mark.asyncio
async def test_update_then_fetch_returns_same_tags(container, backend):
    _seed_bookmark(backend, "b1")
    service = container.bookmark_service
    [bookmark] = await service.get_bookmarks()

    record = await service.update_bookmark(bookmark.with_tags(["python", "async"]))

    assert record.is_committed
    fetched = await service.get_bookmark_by_id("b1")
    assert fetched.tag_names == ["python", "async"]
    state = container.store.get_state()
    assert find_bookmark(state, "b1").tag_names == ["python", "async"]
    assert sorted(t.name for t in state.tags) == ["async", "python"]


@pytest.mark.asyncio
async def test_failed_update_keeps_optimistic_state(container, backend):
    _seed_bookmark(backend, "b1")
    service = container.bookmark_service
    [bookmark] = await service.get_bookmarks()
    backend.fail_on("PUT", "/bookmarks")

    record = await service.update_bookmark(bookmark.with_tags(["offline"]))

    assert record.is_failed
    assert record.reverted is False
    assert "503" in record.error
    assert find_bookmark(container.store.get_state(), "b1").tag_names == ["offline"]
    assert backend.resources["bookmarks"]["b1"]["tags"] == []
    assert record in container.ledger.failed()


@pytest.mark.asyncio
async def test_failed_update_rolls_back_when_configured(rollback_container, backend):
    _seed_bookmark(backend, "b1", tags=["old"])
    service = rollback_container.bookmark_service
    [bookmark] = await service.get_bookmarks()
    backend.fail_on("PUT", "/bookmarks")

    record = await service.update_bookmark(bookmark.with_tags(["old", "new"]))

    assert record.is_failed
    assert record.reverted is True
    assert find_bookmark(rollback_container.store.get_state(), "b1").tag_names == ["old"]


@pytest.mark.asyncio
async def test_failed_create_returns_none(container, backend):
    backend.fail_on("POST", "/bookmarks")
    bookmark = Bookmark(id="b9", url=URL)

    assert await container.bookmark_service.create_bookmark(bookmark) is None
    assert find_bookmark(container.store.get_state(), "b9") is not None


@pytest.mark.asyncio
async def test_failed_create_is_removed_with_rollback(rollback_container, backend):
    backend.fail_on("POST", "/bookmarks")

    await rollback_container.bookmark_service.create_bookmark(Bookmark(id="b9", url=URL))

    assert find_bookmark(rollback_container.store.get_state(), "b9") is None


@pytest.mark.asyncio
async def test_delete_bookmark(container, backend):
    _seed_bookmark(backend, "b1")
    await container.bookmark_service.get_bookmarks()

    record = await container.bookmark_service.delete_bookmark("b1")

    assert record.is_committed
    assert "b1" not in backend.resources["bookmarks"]
    assert container.store.get_state().bookmarks == ()


@pytest.mark.asyncio
async def test_delete_of_missing_remote_counts_as_committed(container):
    container.actions.add_bookmark(Bookmark(id="local", url=URL))

    record = await container.bookmark_service.delete_bookmark("local")

    assert record.is_committed
    assert container.store.get_state().bookmarks == ()


@pytest.mark.asyncio
async def test_failed_delete_restores_with_rollback(rollback_container, backend):
    _seed_bookmark(backend, "b1")
    await rollback_container.bookmark_service.get_bookmarks()
    backend.fail_on("DELETE", "/bookmarks/b1")

    record = await rollback_container.bookmark_service.delete_bookmark("b1")

    assert record.is_failed
    assert [b.id for b in rollback_container.store.get_state().bookmarks] == ["b1"]


# ---------------------------------------------------------------------------
# Local construction
# ---------------------------------------------------------------------------


def test_create_new_bookmark_uses_current_page(container):
    service = container.bookmark_service
    service.set_current_page(PageContext(url="https://example.com/x", title=""))

    bookmark = service.create_new_bookmark(False)

    assert bookmark.url == "https://example.com/x"
    assert bookmark.origin == "https://example.com"
    assert bookmark.title == "example.com"
    assert bookmark.tags == ()
    assert bookmark.created_at > 0


def test_create_new_bookmark_without_page_fails(container):
    with pytest.raises(ValidationFailure) as exc_info:
        container.bookmark_service.create_new_bookmark(True)

    assert exc_info.value.fields == ["url"]
