"""Named entry points that build actions and dispatch them.

Everything outside the store package mutates state through these.
"""

from __future__ import annotations

from collections.abc import Iterable

from webmarker.domain.models import Bookmark, Mark, Tag
from webmarker.store.actions import (
    AddBookmark,
    AddMark,
    AddTag,
    InitBookmarks,
    InitMarks,
    InitTags,
    NavigateToTab,
    Navigation,
    RemoveBookmark,
    RemoveMark,
    RemoveTag,
    ResetState,
    SearchValueChanged,
    Tab,
    UpdateBookmark,
    UpdateMark,
)
from webmarker.store.state import State
from webmarker.store.store import Store


class ActionCreators:
    """Dispatch helpers bound to one store."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def init_bookmarks(self, bookmarks: Iterable[Bookmark]) -> State:
        return self.store.dispatch(InitBookmarks(payload=tuple(bookmarks)))

    def add_bookmark(self, bookmark: Bookmark) -> State:
        return self.store.dispatch(AddBookmark(payload=bookmark))

    def update_bookmark(self, bookmark: Bookmark) -> State:
        return self.store.dispatch(UpdateBookmark(payload=bookmark))

    def remove_bookmark(self, bookmark_id: str) -> State:
        return self.store.dispatch(RemoveBookmark(payload=bookmark_id))

    def init_marks(self, marks: Iterable[Mark]) -> State:
        return self.store.dispatch(InitMarks(payload=tuple(marks)))

    def add_mark(self, mark: Mark) -> State:
        return self.store.dispatch(AddMark(payload=mark))

    def update_mark(self, mark: Mark) -> State:
        return self.store.dispatch(UpdateMark(payload=mark))

    def remove_mark(self, mark_id: str) -> State:
        return self.store.dispatch(RemoveMark(payload=mark_id))

    def init_tags(self, tags: Iterable[Tag]) -> State:
        return self.store.dispatch(InitTags(payload=tuple(tags)))

    def add_tag(self, tag: Tag | str) -> State:
        if isinstance(tag, str):
            tag = Tag(name=tag)
        return self.store.dispatch(AddTag(payload=tag))

    def remove_tag(self, tag: Tag) -> State:
        return self.store.dispatch(RemoveTag(payload=tag))

    def navigate_to_tab(self, view: Tab | str, search_value: str | None = None) -> State:
        """Switch the popup view; clicking a chip also filters by that chip."""
        navigation = Navigation(view=Tab(view), search_value=search_value)
        return self.store.dispatch(NavigateToTab(payload=navigation))

    def search_value_changed(self, value: str) -> State:
        return self.store.dispatch(SearchValueChanged(payload=value))

    def reset_state(self) -> State:
        return self.store.dispatch(ResetState())
