from webmarker.domain.events.ui_events import (
    ChipListClosed,
    DomainEvent,
    LoggedIn,
    SubmitTriggered,
    TagsChanged,
)

__all__ = ["ChipListClosed", "DomainEvent", "LoggedIn", "SubmitTriggered", "TagsChanged"]
