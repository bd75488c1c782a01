"""Bookmark persistence with optimistic store updates."""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

from webmarker.domain.exceptions import NotFound, ValidationFailure
from webmarker.domain.models import Bookmark
from webmarker.services.base import AggregateService
from webmarker.store.state import find_bookmark

if TYPE_CHECKING:
    from webmarker.domain.models import PageContext
    from webmarker.services.operations import OperationRecord
    from webmarker.services.propagation import PropagationResult
    from webmarker.store.state import State

logger = logging.getLogger(__name__)


class BookmarkService(AggregateService[Bookmark]):
    """CRUD for ``/bookmarks`` plus tag propagation to marks on the same page."""

    entity_type = "bookmark"
    base_url = "/bookmarks"
    model = Bookmark

    current_page: PageContext | None = None

    def _find(self, state: State, entity_id: str) -> Bookmark | None:
        return find_bookmark(state, entity_id)

    def _dispatch_init(self, entities: list[Bookmark]) -> None:
        self.actions.init_bookmarks(entities)

    def _dispatch_add(self, entity: Bookmark) -> None:
        self.actions.add_bookmark(entity)

    def _dispatch_update(self, entity: Bookmark) -> None:
        self.actions.update_bookmark(entity)

    def _dispatch_remove(self, entity_id: str) -> None:
        self.actions.remove_bookmark(entity_id)

    async def _propagate(self, entity: Bookmark) -> PropagationResult:
        return await self.update_related_marks(entity)

    async def get_bookmarks(self) -> list[Bookmark]:
        """Fetch all bookmarks and seed the store with them."""
        return await self._fetch_all()

    async def get_bookmark_for_url(self, url: str) -> Bookmark:
        """Fetch the bookmark saved for ``url``.

        Raises:
            NotFound: If no bookmark exists for the url.
            NetworkFailure: If the request fails.
        """
        data = await self.client.get(f"{self.base_url}/url", params={"url": url})
        if not data:
            raise NotFound(f"No bookmark for url {url}", {"url": url})
        return self._parse(data)

    async def get_bookmark_by_id(self, bookmark_id: str) -> Bookmark:
        return await self._fetch_one(bookmark_id)

    async def create_bookmark(self, bookmark: Bookmark) -> Bookmark | None:
        """Add ``bookmark`` to the store and persist it.

        Returns:
            The backend's representation, or None when the remote phase failed.
        """
        return await self._create(bookmark)

    async def update_bookmark(
        self, bookmark: Bookmark, *, propagate: bool = True
    ) -> OperationRecord:
        """Update a bookmark, propagate its tags to related marks, then reconcile.

        Args:
            bookmark: The edited bookmark.
            propagate: False for updates that are themselves part of a propagation.
        """
        return await self._update(bookmark, propagate=propagate)

    async def delete_bookmark(self, bookmark_id: str) -> OperationRecord:
        return await self._delete(bookmark_id)

    async def update_related_marks(self, bookmark: Bookmark) -> PropagationResult:
        """Give every mark on the bookmark's page the bookmark's tags."""
        if self.propagator is None:
            raise RuntimeError("Tag propagator not configured for bookmark service")
        return await self.propagator.propagate_from_bookmark(bookmark)

    def set_current_page(self, page: PageContext | None) -> None:
        self.current_page = page

    def create_new_bookmark(
        self, is_starred: bool, page: PageContext | None = None
    ) -> Bookmark:
        """Build an unsaved bookmark for ``page`` (default: the current page).

        The bookmark gets a fresh UUID and a millisecond creation timestamp.

        Raises:
            ValidationFailure: If no page is known.
        """
        page = page or self.current_page
        if page is None:
            raise ValidationFailure("No page to bookmark", fields=["url"])
        return Bookmark(
            id=str(uuid.uuid4()),
            created_at=int(time.time() * 1000),
            url=page.url,
            is_starred=is_starred,
            tags=(),
            title=page.display_title,
            origin=page.origin,
        )
