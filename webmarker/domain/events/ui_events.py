"""Events emitted by the UI surfaces.

Surfaces publish these on the event bus instead of DOM custom events; other
surfaces (or the host application) subscribe to react.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    occurred_at: datetime
    aggregate_id: str | None = None

    def __post_init__(self) -> None:
        """Validate event data after initialization."""
        if not isinstance(self.occurred_at, datetime):
            raise TypeError("occurred_at must be a datetime")


@dataclass(frozen=True)
class TagsChanged(DomainEvent):
    """Raised when the chip list commits or removes a tag.

    ``chips`` is de-duplicated; ``deleted_chip`` names the removed chip, if any.
    """

    chips: tuple[str, ...] = field(default_factory=tuple)
    deleted_chip: str | None = None

    def __post_init__(self) -> None:
        """Validate event data."""
        super().__post_init__()
        if len({chip.casefold() for chip in self.chips}) != len(self.chips):
            raise ValueError("chips must not contain duplicates")


@dataclass(frozen=True)
class SubmitTriggered(DomainEvent):
    """Raised when the user presses Enter on an empty chip input."""

    chips: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ChipListClosed(DomainEvent):
    """Raised when the chip list is dismissed by an outside click."""


@dataclass(frozen=True)
class LoggedIn(DomainEvent):
    """Raised by the sign-in form after the backend returned a token."""

    email: str = ""
