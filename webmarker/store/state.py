"""The state snapshot held by the store, and read-only selectors over it."""

from __future__ import annotations

from dataclasses import dataclass

from webmarker.core.tag_utils import sort_names
from webmarker.domain.models import Bookmark, Mark, Tag
from webmarker.store.actions import Tab


@dataclass(frozen=True)
class State:
    """Immutable snapshot of everything the surfaces render.

    A new instance replaces the old one on every dispatch. ``last_action``
    names the action that produced this snapshot.
    """

    marks: tuple[Mark, ...] = ()
    bookmarks: tuple[Bookmark, ...] = ()
    tags: tuple[Tag, ...] = ()
    active_view: Tab = Tab.ACCORDION
    search_value: str = ""
    last_action: str | None = None


def find_bookmark(state: State, bookmark_id: str) -> Bookmark | None:
    return next((b for b in state.bookmarks if b.id == bookmark_id), None)


def find_mark(state: State, mark_id: str) -> Mark | None:
    return next((m for m in state.marks if m.id == mark_id), None)


def bookmarks_for_url(state: State, url: str) -> list[Bookmark]:
    return [b for b in state.bookmarks if b.url == url]


def marks_for_url(state: State, url: str) -> list[Mark]:
    return [m for m in state.marks if m.url == url]


def all_tag_names(state: State) -> list[str]:
    """Tag dictionary for autocomplete: unique names in locale order."""
    return sort_names(tag.name for tag in state.tags)
