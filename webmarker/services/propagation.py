"""Tag propagation between aggregates that share a page url.

Tagging a page once should tag it everywhere: after a bookmark's tags change,
every mark on the same url receives the same tags, and the other way round.
Bookmarks and marks are separate backend resources, so this is a fan-out of
independent updates rather than one transaction. Each target runs its own
optimistic/remote/reconcile cycle; a failing target does not stop or undo
the others and is reported in the PropagationResult.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from webmarker.core.logging_utils import generate_correlation_id
from webmarker.services.operations import OperationRecord
from webmarker.store.state import bookmarks_for_url, marks_for_url

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from webmarker.domain.models import Bookmark, Mark, TaggedEntity
    from webmarker.services.protocols import BookmarkUpdater, MarkUpdater
    from webmarker.store.store import Store

logger = logging.getLogger(__name__)


@dataclass
class PropagationResult:
    """Per-target outcome of one propagation run."""

    source_type: str
    source_id: str
    url: str
    correlation_id: str
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def targets(self) -> list[str]:
        return [*self.succeeded, *self.failed]

    @property
    def is_complete(self) -> bool:
        """True when every target accepted the new tags."""
        return not self.failed


class TagPropagator:
    """Fans a tag edit out to the aggregates of the other type on the same url."""

    def __init__(self, store: Store) -> None:
        self._store = store
        self._bookmarks: BookmarkUpdater | None = None
        self._marks: MarkUpdater | None = None

    def register(self, *, bookmarks: BookmarkUpdater, marks: MarkUpdater) -> None:
        self._bookmarks = bookmarks
        self._marks = marks

    async def propagate_from_bookmark(self, bookmark: Bookmark) -> PropagationResult:
        """Copy ``bookmark``'s tags onto every mark with the same url."""
        targets = marks_for_url(self._store.get_state(), bookmark.url)
        marks = self._marks

        async def _update(mark: Mark) -> OperationRecord:
            if marks is None:
                raise RuntimeError("Mark service not registered with propagator")
            return await marks.update_mark(mark.with_tags(bookmark.tags), propagate=False)

        return await self._run("bookmark", bookmark, targets, _update)

    async def propagate_from_mark(self, mark: Mark) -> PropagationResult:
        """Copy ``mark``'s tags onto every bookmark with the same url."""
        targets = bookmarks_for_url(self._store.get_state(), mark.url)
        bookmarks = self._bookmarks

        async def _update(bookmark: Bookmark) -> OperationRecord:
            if bookmarks is None:
                raise RuntimeError("Bookmark service not registered with propagator")
            return await bookmarks.update_bookmark(bookmark.with_tags(mark.tags), propagate=False)

        return await self._run("mark", mark, targets, _update)

    async def _run(
        self,
        source_type: str,
        source: TaggedEntity,
        targets: Sequence[Any],
        update: Callable[[Any], Awaitable[OperationRecord]],
    ) -> PropagationResult:
        result = PropagationResult(
            source_type=source_type,
            source_id=source.id,
            url=source.url,
            correlation_id=generate_correlation_id(),
        )
        if not targets:
            logger.debug(
                "tag_propagation_no_targets",
                extra={"correlation_id": result.correlation_id, "source_id": source.id},
            )
            return result

        outcomes = await asyncio.gather(
            *(update(target) for target in targets), return_exceptions=True
        )

        for target, outcome in zip(targets, outcomes, strict=True):
            if isinstance(outcome, OperationRecord) and outcome.is_committed:
                result.succeeded.append(target.id)
                continue
            result.failed.append(target.id)
            if isinstance(outcome, OperationRecord):
                result.errors[target.id] = outcome.error or outcome.status.value
            else:
                result.errors[target.id] = str(outcome)
                logger.error(
                    "tag_propagation_target_raised",
                    exc_info=outcome,
                    extra={"correlation_id": result.correlation_id, "target_id": target.id},
                )

        log = logger.info if result.is_complete else logger.warning
        log(
            "tag_propagation_finished",
            extra={
                "correlation_id": result.correlation_id,
                "source_type": source_type,
                "source_id": source.id,
                "url": source.url,
                "tags": source.tag_names,
                "succeeded": len(result.succeeded),
                "failed": len(result.failed),
            },
        )
        return result
