"""Tag dictionary persistence."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from webmarker.config import SyncConfig
from webmarker.core.tag_utils import collation_key, tag_key
from webmarker.domain.exceptions import NetworkFailure, NotFound
from webmarker.domain.models import Tag
from webmarker.services.operations import OperationKind, OperationLedger, OperationRecord

if TYPE_CHECKING:
    from webmarker.services.protocols import BackendTransport
    from webmarker.store.action_creators import ActionCreators

logger = logging.getLogger(__name__)


class TagService:
    """Keeps ``state.tags`` in line with ``/tags``."""

    base_url = "/tags"

    def __init__(
        self,
        client: BackendTransport,
        actions: ActionCreators,
        ledger: OperationLedger | None = None,
        *,
        sync_config: SyncConfig | None = None,
    ) -> None:
        self.client = client
        self.actions = actions
        self.ledger = ledger or OperationLedger()
        self.sync_config = sync_config or SyncConfig()

    async def get_tags(self) -> list[Tag]:
        """Fetch the tag dictionary, seed the store and return it in locale order."""
        data = await self.client.get(self.base_url)
        tags = sorted(
            (Tag.model_validate(item) for item in data or []),
            key=lambda tag: collation_key(tag.name),
        )
        self.actions.init_tags(tags)
        return tags

    def find(self, name: str) -> Tag | None:
        key = tag_key(name)
        return next((t for t in self.actions.store.get_state().tags if t.key == key), None)

    async def create_tag(self, name: str) -> Tag | None:
        """Add a tag unless one with the same name (ignoring case) exists.

        Returns:
            The existing or created tag; None for a blank name or a failed
            remote phase.
        """
        name = name.strip()
        if not name:
            return None
        existing = self.find(name)
        if existing is not None:
            return existing

        tag = Tag(name=name)
        record = self.ledger.start("tag", tag_key(name), OperationKind.CREATE)
        self.actions.add_tag(tag)
        try:
            data = await self.client.post(self.base_url, {"name": name})
        except (NetworkFailure, NotFound) as exc:
            self._fail(record, exc, revert=lambda: self.actions.remove_tag(tag))
            return None
        record.mark_as_committed()

        created = Tag.model_validate(data) if isinstance(data, dict) else tag
        try:
            await self.get_tags()
        except (NetworkFailure, NotFound) as exc:
            logger.warning("tag_reconcile_failed", extra={"error": str(exc)})
        return created

    async def delete_tag(self, tag: Tag) -> OperationRecord:
        record = self.ledger.start("tag", tag.id or tag.key, OperationKind.DELETE)
        self.actions.remove_tag(tag)
        if tag.id is None:
            record.mark_as_committed()
            return record
        try:
            await self.client.delete(f"{self.base_url}/{tag.id}")
        except NotFound:
            logger.debug("tag_already_deleted", extra={"entity_id": tag.id})
        except NetworkFailure as exc:
            self._fail(record, exc, revert=lambda: self.actions.add_tag(tag))
            return record
        record.mark_as_committed()
        return record

    def _fail(
        self,
        record: OperationRecord,
        exc: Exception,
        revert: Callable[[], object],
    ) -> None:
        record.mark_as_failed(str(exc))
        logger.warning(
            f"tag_{record.kind.value}_remote_failed",
            extra={"entity_id": record.entity_id, "error": str(exc)},
        )
        if self.sync_config.rollback_on_failure:
            revert()
            record.mark_as_reverted()
            logger.info(
                f"tag_{record.kind.value}_reverted",
                extra={"entity_id": record.entity_id, "operation_id": record.operation_id},
            )
