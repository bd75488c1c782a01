"""Protocol definitions (ports) used by the services.

Keeping these as Protocols lets the propagation saga and the services be
tested against fakes instead of the concrete HTTP client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from webmarker.domain.models import Bookmark, Mark
    from webmarker.services.operations import OperationRecord


class BackendTransport(Protocol):
    async def get(self, path: str, params: dict[str, str] | None = None) -> Any: ...

    async def post(self, path: str, payload: Any, *, operation: str = "create") -> Any: ...

    async def put(self, path: str, payload: Any) -> Any: ...

    async def delete(self, path: str) -> Any: ...

    @property
    def token(self) -> str | None: ...

    def set_token(self, token: str | None) -> None: ...


class BookmarkUpdater(Protocol):
    async def update_bookmark(
        self, bookmark: Bookmark, *, propagate: bool = True
    ) -> OperationRecord: ...


class MarkUpdater(Protocol):
    async def update_mark(self, mark: Mark, *, propagate: bool = True) -> OperationRecord: ...
