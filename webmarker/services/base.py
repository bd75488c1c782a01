"""Shared optimistic-update cycle for bookmark and mark persistence.

A mutating call runs in three phases:

1. optimistic dispatch, so surfaces reflect the change immediately;
2. the remote request;
3. reconciliation, replacing the optimistic state with the backend's.

A failed remote phase is logged and recorded in the ledger, never raised to
the caller. The optimistic state stays unless ``rollback_on_failure`` is set.
A reconciliation that completes late can overwrite a newer optimistic
update; the store keeps whichever dispatch came last.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from webmarker.config import SyncConfig
from webmarker.domain.exceptions import NetworkFailure, NotFound
from webmarker.domain.models import TaggedEntity
from webmarker.services.operations import OperationKind, OperationLedger, OperationRecord

if TYPE_CHECKING:
    from webmarker.services.propagation import PropagationResult, TagPropagator
    from webmarker.services.protocols import BackendTransport
    from webmarker.services.tag_service import TagService
    from webmarker.store.action_creators import ActionCreators
    from webmarker.store.state import State

logger = logging.getLogger(__name__)

TEntity = TypeVar("TEntity", bound=TaggedEntity)


class AggregateService(ABC, Generic[TEntity]):
    """Base class for services persisting one tagged aggregate type."""

    entity_type: ClassVar[str]
    base_url: ClassVar[str]
    model: ClassVar[type[TaggedEntity]]

    def __init__(
        self,
        client: BackendTransport,
        actions: ActionCreators,
        ledger: OperationLedger | None = None,
        *,
        tag_service: TagService | None = None,
        propagator: TagPropagator | None = None,
        sync_config: SyncConfig | None = None,
    ) -> None:
        self.client = client
        self.actions = actions
        self.ledger = ledger or OperationLedger()
        self.tag_service = tag_service
        self.propagator = propagator
        self.sync_config = sync_config or SyncConfig()

    # Hooks implemented by the concrete services

    @abstractmethod
    def _find(self, state: State, entity_id: str) -> TEntity | None:
        """Look ``entity_id`` up in a snapshot."""

    @abstractmethod
    def _dispatch_init(self, entities: list[TEntity]) -> None:
        """Replace the store collection with ``entities``."""

    @abstractmethod
    def _dispatch_add(self, entity: TEntity) -> None:
        pass

    @abstractmethod
    def _dispatch_update(self, entity: TEntity) -> None:
        pass

    @abstractmethod
    def _dispatch_remove(self, entity_id: str) -> None:
        pass

    @abstractmethod
    async def _propagate(self, entity: TEntity) -> PropagationResult:
        """Copy the entity's tags onto related aggregates."""

    # Shared cycle

    def _parse(self, data: Any) -> TEntity:
        return self.model.model_validate(data)  # type: ignore[return-value]

    def _parse_many(self, data: Any) -> list[TEntity]:
        return [self._parse(item) for item in data or []]

    async def _fetch_all(self, *, seed_store: bool = True) -> list[TEntity]:
        entities = self._parse_many(await self.client.get(self.base_url))
        if seed_store:
            self._dispatch_init(entities)
        logger.debug(
            f"{self.entity_type}_collection_fetched", extra={"count": len(entities)}
        )
        return entities

    async def _fetch_one(self, entity_id: str) -> TEntity:
        data = await self.client.get(f"{self.base_url}/{entity_id}")
        if not data:
            raise NotFound(f"{self.entity_type} {entity_id} not found", {"id": entity_id})
        return self._parse(data)

    async def _create(self, entity: TEntity) -> TEntity | None:
        record = self.ledger.start(self.entity_type, entity.id, OperationKind.CREATE)
        self._dispatch_add(entity)
        try:
            data = await self.client.post(self.base_url, entity.to_wire())
        except (NetworkFailure, NotFound) as exc:
            self._fail(record, exc, revert=lambda: self._dispatch_remove(entity.id))
            return None

        created = self._parse(data) if isinstance(data, dict) else entity
        self._dispatch_add(created)
        record.mark_as_committed()
        logger.info(
            f"{self.entity_type}_created",
            extra={"entity_id": created.id, "url": created.url, "operation_id": record.operation_id},
        )
        return created

    async def _update(self, entity: TEntity, *, propagate: bool) -> OperationRecord:
        previous = self._find(self.actions.store.get_state(), entity.id)
        record = self.ledger.start(self.entity_type, entity.id, OperationKind.UPDATE)
        self._dispatch_update(entity)

        try:
            await self.client.put(self.base_url, entity.to_wire())
        except (NetworkFailure, NotFound) as exc:
            revert = (lambda: self._dispatch_update(previous)) if previous is not None else None
            self._fail(record, exc, revert=revert)
            return record
        record.mark_as_committed()

        if propagate and self._should_propagate(previous, entity):
            record.propagation = await self._propagate(entity)

        await self._reconcile()
        return record

    async def _delete(self, entity_id: str) -> OperationRecord:
        previous = self._find(self.actions.store.get_state(), entity_id)
        record = self.ledger.start(self.entity_type, entity_id, OperationKind.DELETE)
        self._dispatch_remove(entity_id)

        try:
            await self.client.delete(f"{self.base_url}/{entity_id}")
        except NotFound:
            logger.info(
                f"{self.entity_type}_already_deleted",
                extra={"entity_id": entity_id, "operation_id": record.operation_id},
            )
        except NetworkFailure as exc:
            revert = (lambda: self._dispatch_add(previous)) if previous is not None else None
            self._fail(record, exc, revert=revert)
            return record

        record.mark_as_committed()
        return record

    def _should_propagate(self, previous: TEntity | None, entity: TEntity) -> bool:
        """Cheap dirty check: propagate only when the tag count changed."""
        if self.propagator is None or not self.sync_config.propagate_tags:
            return False
        if previous is None:
            return True
        return len(previous.tags) != len(entity.tags)

    async def _reconcile(self) -> None:
        """Replace optimistic state with the backend's collections."""
        try:
            await self._fetch_all()
            if self.tag_service is not None:
                await self.tag_service.get_tags()
        except (NetworkFailure, NotFound) as exc:
            logger.warning(
                f"{self.entity_type}_reconcile_failed",
                extra={"error": str(exc)},
            )

    def _fail(
        self,
        record: OperationRecord,
        exc: Exception,
        revert: Callable[[], None] | None,
    ) -> None:
        record.mark_as_failed(str(exc))
        logger.warning(
            f"{self.entity_type}_{record.kind.value}_remote_failed",
            extra={
                "entity_id": record.entity_id,
                "operation_id": record.operation_id,
                "status_code": getattr(exc, "status_code", None),
                "error": str(exc),
            },
        )
        if self.sync_config.rollback_on_failure and revert is not None:
            revert()
            record.mark_as_reverted()
            logger.info(
                f"{self.entity_type}_{record.kind.value}_reverted",
                extra={"entity_id": record.entity_id, "operation_id": record.operation_id},
            )
