"""Dependency injection container for wiring components.

One container is one session: one store, one backend client and the services
that share them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from webmarker.adapters.backend.client import BackendClient
from webmarker.config import AppConfig, load_config
from webmarker.core.logging_utils import setup_json_logging
from webmarker.infrastructure.messaging.event_bus import EventBus
from webmarker.services import (
    BookmarkService,
    MarkService,
    OperationLedger,
    TagPropagator,
    TagService,
    UserService,
)
from webmarker.store import ActionCreators, Store
from webmarker.ui import ChipListModel, HeaderToggleModel, SignInForm

if TYPE_CHECKING:
    from typing import Self

    import httpx

    from webmarker.domain.models import Mark


class Container:
    """Builds and owns the collaborators of one session.

    Example:
        ```python
        async with Container(load_config()) as container:
            await container.bookmark_service.get_bookmarks()
            editor = container.chip_list(mark=some_mark)
        ```

    """

    def __init__(
        self,
        config: AppConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the container.

        Args:
            config: Application configuration.
            transport: Optional httpx transport handed to the backend client.

        """
        self.config = config
        self.store = Store()
        self.actions = ActionCreators(self.store)
        self.events = EventBus()
        self.ledger = OperationLedger()
        self.client = BackendClient.from_config(config.backend, transport=transport)
        self.propagator = TagPropagator(self.store)

        self.tag_service = TagService(
            self.client, self.actions, self.ledger, sync_config=config.sync
        )
        self.bookmark_service = BookmarkService(
            self.client,
            self.actions,
            self.ledger,
            tag_service=self.tag_service,
            propagator=self.propagator,
            sync_config=config.sync,
        )
        self.mark_service = MarkService(
            self.client,
            self.actions,
            self.ledger,
            tag_service=self.tag_service,
            propagator=self.propagator,
            sync_config=config.sync,
        )
        self.user_service = UserService(self.client, self.actions)
        self.propagator.register(bookmarks=self.bookmark_service, marks=self.mark_service)

    async def __aenter__(self) -> Self:
        await self.client.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.client.aclose()

    def chip_list(self, mark: Mark | None = None) -> ChipListModel:
        return ChipListModel(
            self.actions, self.events, mark=mark, mark_service=self.mark_service
        )

    def header_toggle(self) -> HeaderToggleModel:
        return HeaderToggleModel(self.actions)

    def sign_in_form(self) -> SignInForm:
        return SignInForm(self.user_service, self.events)


def build_container(
    config: AppConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Container:
    """Create a container, loading configuration from the environment if needed.

    Loading from the environment also configures process-wide logging.
    """
    if config is None:
        config = load_config()
        setup_json_logging(
            config.runtime.log_level,
            use_loguru=config.runtime.log_json,
            log_file=config.runtime.log_file,
        )
    return Container(config, transport=transport)
