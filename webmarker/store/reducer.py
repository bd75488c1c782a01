"""Pure state transitions.

``reducer(state, action)`` never mutates its inputs. Every transition, the
no-op ones included, stamps ``last_action`` with the action type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import Any, TypeVar

from webmarker.domain.models import Tag, TaggedEntity
from webmarker.store.actions import (
    Action,
    ActionType,
    AddBookmark,
    AddMark,
    AddTag,
    InitBookmarks,
    InitMarks,
    InitTags,
    NavigateToTab,
    RemoveBookmark,
    RemoveMark,
    RemoveTag,
    SearchValueChanged,
    UpdateBookmark,
    UpdateMark,
)
from webmarker.store.state import State

TEntity = TypeVar("TEntity", bound=TaggedEntity)


def _upsert(items: tuple[TEntity, ...], entity: TEntity) -> tuple[TEntity, ...]:
    if any(item.id == entity.id for item in items):
        return tuple(entity if item.id == entity.id else item for item in items)
    return (*items, entity)


def _replace(items: tuple[TEntity, ...], entity: TEntity) -> tuple[TEntity, ...]:
    return tuple(entity if item.id == entity.id else item for item in items)


def _remove(items: tuple[TEntity, ...], entity_id: str) -> tuple[TEntity, ...]:
    return tuple(item for item in items if item.id != entity_id)


def unique_tags(tags: Iterable[Tag]) -> tuple[Tag, ...]:
    """Drop blank and case-insensitive duplicate tags; the first one wins."""
    seen: set[str] = set()
    result: list[Tag] = []
    for tag in tags:
        if not tag.key or tag.key in seen:
            continue
        seen.add(tag.key)
        result.append(tag)
    return tuple(result)


def _init_bookmarks(state: State, action: InitBookmarks) -> State:
    return replace(state, bookmarks=tuple(action.payload))


def _add_bookmark(state: State, action: AddBookmark) -> State:
    return replace(state, bookmarks=_upsert(state.bookmarks, action.payload))


def _update_bookmark(state: State, action: UpdateBookmark) -> State:
    return replace(state, bookmarks=_replace(state.bookmarks, action.payload))


def _remove_bookmark(state: State, action: RemoveBookmark) -> State:
    return replace(state, bookmarks=_remove(state.bookmarks, action.payload))


def _init_marks(state: State, action: InitMarks) -> State:
    return replace(state, marks=tuple(action.payload))


def _add_mark(state: State, action: AddMark) -> State:
    return replace(state, marks=_upsert(state.marks, action.payload))


def _update_mark(state: State, action: UpdateMark) -> State:
    return replace(state, marks=_replace(state.marks, action.payload))


def _remove_mark(state: State, action: RemoveMark) -> State:
    return replace(state, marks=_remove(state.marks, action.payload))


def _init_tags(state: State, action: InitTags) -> State:
    return replace(state, tags=unique_tags(action.payload))


def _add_tag(state: State, action: AddTag) -> State:
    tag = action.payload
    if not tag.key or any(existing.key == tag.key for existing in state.tags):
        return state
    return replace(state, tags=(*state.tags, tag))


def _remove_tag(state: State, action: RemoveTag) -> State:
    target = action.payload
    if target.id is not None:
        tags = tuple(tag for tag in state.tags if tag.id != target.id)
    else:
        tags = tuple(tag for tag in state.tags if tag.key != target.key)
    return replace(state, tags=tags)


def _navigate_to_tab(state: State, action: NavigateToTab) -> State:
    navigation = action.payload
    if navigation.search_value is None:
        return replace(state, active_view=navigation.view)
    return replace(state, active_view=navigation.view, search_value=navigation.search_value)


def _search_value_changed(state: State, action: SearchValueChanged) -> State:
    return replace(state, search_value=action.payload)


def _reset_state(state: State, action: Any) -> State:
    return State()


_HANDLERS: dict[str, Callable[[State, Any], State]] = {
    ActionType.INIT_BOOKMARKS.value: _init_bookmarks,
    ActionType.ADD_BOOKMARK.value: _add_bookmark,
    ActionType.UPDATE_BOOKMARK.value: _update_bookmark,
    ActionType.REMOVE_BOOKMARK.value: _remove_bookmark,
    ActionType.INIT_MARKS.value: _init_marks,
    ActionType.ADD_MARK.value: _add_mark,
    ActionType.UPDATE_MARK.value: _update_mark,
    ActionType.REMOVE_MARK.value: _remove_mark,
    ActionType.INIT_TAGS.value: _init_tags,
    ActionType.ADD_TAG.value: _add_tag,
    ActionType.REMOVE_TAG.value: _remove_tag,
    ActionType.NAVIGATE_TO_TAB.value: _navigate_to_tab,
    ActionType.SEARCH_VALUE_CHANGED.value: _search_value_changed,
    ActionType.RESET_STATE.value: _reset_state,
}


def reducer(state: State, action: Action) -> State:
    """Compute the snapshot that follows ``state`` once ``action`` is applied.

    Unknown action types leave the state as is apart from ``last_action``.
    """
    handler = _HANDLERS.get(action.type)
    new_state = handler(state, action) if handler is not None else state
    return replace(new_state, last_action=action.type)
