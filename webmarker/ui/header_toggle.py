"""Headless state of the popup header: view tabs and the search field."""

from __future__ import annotations

from typing import TYPE_CHECKING

from webmarker.store.actions import Tab

if TYPE_CHECKING:
    from webmarker.store.action_creators import ActionCreators
    from webmarker.store.state import State


class HeaderToggleModel:
    def __init__(self, actions: ActionCreators) -> None:
        self.actions = actions
        state = actions.store.get_state()
        self.active_view: Tab = state.active_view
        self.search_active = False
        self.search_input = ""
        self._unsubscribe = actions.store.subscribe(self.state_changed)

    def state_changed(self, state: State) -> None:
        # Someone else cleared the search: reset the field and follow the view.
        if not state.search_value and self.search_input:
            self.search_input = state.search_value
            self.active_view = state.active_view
            self.search_active = False

    def close(self) -> None:
        self._unsubscribe()

    def select_view(self, view: Tab | str) -> None:
        self.active_view = Tab(view)
        self.actions.navigate_to_tab(self.active_view)

    def toggle_search(self) -> None:
        self.search_active = not self.search_active

    def input_search(self, text: str) -> None:
        """Publish the search text, lower-cased, to the store."""
        self.search_input = text
        self.actions.search_value_changed(text.lower())
