"""Headless state of the chip-style tag editor.

The editor holds a list of chips and a text input. Keystrokes drive a small
state machine:

* typing a character returns to ``idle`` from either pending state;
* Backspace on an empty input arms ``pending_delete``; a second Backspace
  removes the last chip;
* Enter with text commits a chip (the highlighted autocomplete value wins
  over the typed text) and arms ``pending_submit``; Enter on an empty input
  arms ``pending_submit`` and a second one publishes SubmitTriggered.

Chips are compared case-insensitively and keep insertion order.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from webmarker.core.tag_utils import contains_name, dedupe_names
from webmarker.domain.events import ChipListClosed, SubmitTriggered, TagsChanged
from webmarker.store.actions import ActionType, Tab
from webmarker.store.state import all_tag_names, find_mark

if TYPE_CHECKING:
    from webmarker.domain.models import Mark, Tag
    from webmarker.infrastructure.messaging.event_bus import EventBus
    from webmarker.services.mark_service import MarkService
    from webmarker.store.action_creators import ActionCreators
    from webmarker.store.state import State

logger = logging.getLogger(__name__)

ENTER = "Enter"
BACKSPACE = "Backspace"


class ChipInputState(str, Enum):
    IDLE = "idle"
    PENDING_DELETE = "pending_delete"
    PENDING_SUBMIT = "pending_submit"


class ChipListModel:
    """Tag editor bound to an optional mark.

    When bound to a mark, a commit that changes the number of chips updates
    the mark through the mark service, which propagates the tags to
    bookmarks on the same page.
    """

    def __init__(
        self,
        actions: ActionCreators,
        events: EventBus,
        *,
        mark: Mark | None = None,
        mark_service: MarkService | None = None,
    ) -> None:
        self.actions = actions
        self.events = events
        self.mark = mark
        self.mark_service = mark_service
        self.chips: list[str] = list(mark.tag_names) if mark else []
        self.input_value = ""
        self.autocomplete_value = ""
        self.input_state = ChipInputState.IDLE
        self.tags: tuple[Tag, ...] = actions.store.get_state().tags
        self._unsubscribe = actions.store.subscribe(self.state_changed)

    def state_changed(self, state: State) -> None:
        if self.mark is None or state.last_action != ActionType.UPDATE_MARK.value:
            return
        updated = find_mark(state, self.mark.id)
        if updated is None:
            return
        self.tags = state.tags
        self.mark = updated
        self.chips = list(updated.tag_names)

    def close(self) -> None:
        """Detach from the store."""
        self._unsubscribe()

    @property
    def all_tag_names(self) -> list[str]:
        return all_tag_names(self.actions.store.get_state())

    def suggestions(self, prefix: str) -> list[str]:
        """Autocomplete candidates starting with ``prefix``, ignoring case."""
        needle = prefix.strip().casefold()
        if not needle:
            return []
        return [name for name in self.all_tag_names if name.casefold().startswith(needle)]

    @property
    def delete_armed(self) -> bool:
        return self.input_state == ChipInputState.PENDING_DELETE

    async def key_down(self, key: str, value: str) -> None:
        """Feed one keystroke and the input's value after it."""
        self.input_value = value
        if value or len(key) == 1:
            self.input_state = ChipInputState.IDLE

        if key == ENTER:
            await self._on_enter(value)
        elif key == BACKSPACE and not value and self.chips:
            if self.input_state == ChipInputState.PENDING_DELETE:
                removed = self.chips.pop()
                self.input_state = ChipInputState.IDLE
                await self.emit(deleted_chip=removed)
            else:
                self.input_state = ChipInputState.PENDING_DELETE

    async def _on_enter(self, value: str) -> None:
        if value.strip():
            self.add_chip(self.autocomplete_value or value)
            self.autocomplete_value = ""
            self.input_state = ChipInputState.PENDING_SUBMIT
            await self.emit()
            return

        if self.input_state == ChipInputState.PENDING_SUBMIT:
            self.input_state = ChipInputState.IDLE
            await self.events.publish(
                SubmitTriggered(
                    occurred_at=datetime.now(UTC),
                    aggregate_id=self.mark.id if self.mark else None,
                    chips=tuple(dedupe_names(self.chips)),
                )
            )
        else:
            self.input_state = ChipInputState.PENDING_SUBMIT

    def add_chip(self, value: str) -> bool:
        """Append ``value`` unless it is blank or already present; clears the input."""
        self.input_value = ""
        name = value.strip()
        if not name or contains_name(self.chips, name):
            return False
        self.chips.append(name)
        return True

    async def remove_chip(self, chip: str) -> None:
        self.chips = [c for c in self.chips if c != chip]
        await self.emit(deleted_chip=chip)

    async def select_autocomplete(self, value: str, *, click: bool = False) -> None:
        """Handle the autocomplete list.

        A click commits ``value`` right away; keyboard highlighting only
        remembers it for the next Enter.
        """
        if not click:
            self.autocomplete_value = value
            return
        self.add_chip(value)
        self.autocomplete_value = ""
        await self.emit()

    def click_chip(self, chip: str) -> None:
        """Open the tags view filtered by ``chip``."""
        self.actions.navigate_to_tab(Tab.TAGS, chip)

    async def emit(self, deleted_chip: str | None = None) -> None:
        await self.events.publish(
            TagsChanged(
                occurred_at=datetime.now(UTC),
                aggregate_id=self.mark.id if self.mark else None,
                chips=tuple(dedupe_names(self.chips)),
                deleted_chip=deleted_chip,
            )
        )

        if self.mark is None or self.mark_service is None:
            return
        if len(self.mark.tags) == len(self.chips):
            return
        self.mark = self.mark.with_tags(self.chips)
        logger.debug(
            "chip_list_mark_update", extra={"mark_id": self.mark.id, "chips": self.chips}
        )
        await self.mark_service.update_mark(self.mark)

    async def dismiss(self) -> None:
        """Close on an outside click: notify listeners and detach."""
        self.close()
        await self.events.publish(
            ChipListClosed(
                occurred_at=datetime.now(UTC),
                aggregate_id=self.mark.id if self.mark else None,
            )
        )
