"""Mark persistence with optimistic store updates."""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

from webmarker.domain.exceptions import ValidationFailure
from webmarker.domain.models import Mark
from webmarker.services.base import AggregateService
from webmarker.store.state import find_mark

if TYPE_CHECKING:
    from webmarker.domain.models import PageContext
    from webmarker.services.operations import OperationRecord
    from webmarker.services.propagation import PropagationResult
    from webmarker.store.state import State


class MarkService(AggregateService[Mark]):
    """CRUD for ``/marks`` plus tag propagation to bookmarks on the same page."""

    entity_type = "mark"
    base_url = "/marks"
    model = Mark

    def _find(self, state: State, entity_id: str) -> Mark | None:
        return find_mark(state, entity_id)

    def _dispatch_init(self, entities: list[Mark]) -> None:
        self.actions.init_marks(entities)

    def _dispatch_add(self, entity: Mark) -> None:
        self.actions.add_mark(entity)

    def _dispatch_update(self, entity: Mark) -> None:
        self.actions.update_mark(entity)

    def _dispatch_remove(self, entity_id: str) -> None:
        self.actions.remove_mark(entity_id)

    async def _propagate(self, entity: Mark) -> PropagationResult:
        return await self.update_related_bookmarks(entity)

    async def get_marks(self) -> list[Mark]:
        """Fetch all marks and seed the store with them."""
        return await self._fetch_all()

    async def get_marks_for_url(self, url: str) -> list[Mark]:
        """Marks saved on ``url``; the store is left untouched."""
        data = await self.client.get(f"{self.base_url}/url", params={"url": url})
        if isinstance(data, dict):
            data = [data]
        return self._parse_many(data)

    async def get_mark_by_id(self, mark_id: str) -> Mark:
        return await self._fetch_one(mark_id)

    async def create_mark(self, mark: Mark) -> Mark | None:
        return await self._create(mark)

    async def update_mark(self, mark: Mark, *, propagate: bool = True) -> OperationRecord:
        """Update a mark, propagate its tags to related bookmarks, then reconcile."""
        return await self._update(mark, propagate=propagate)

    async def delete_mark(self, mark_id: str) -> OperationRecord:
        return await self._delete(mark_id)

    async def update_related_bookmarks(self, mark: Mark) -> PropagationResult:
        if self.propagator is None:
            raise RuntimeError("Tag propagator not configured for mark service")
        return await self.propagator.propagate_from_mark(mark)

    def create_new_mark(self, page: PageContext, text: str, tags: list[str] | None = None) -> Mark:
        """Build an unsaved mark for a passage of ``page``.

        Raises:
            ValidationFailure: If ``text`` is blank.
        """
        if not text.strip():
            raise ValidationFailure("Mark text must not be empty", fields=["text"])
        return Mark(
            id=str(uuid.uuid4()),
            created_at=int(time.time() * 1000),
            url=page.url,
            origin=page.origin,
            title=page.display_title,
            text=text,
            tags=tags or [],
        )
