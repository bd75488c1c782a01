"""Action types accepted by the store.

Actions form a closed union discriminated by ``type``. Plain mappings of the
form ``{"type": ..., "payload": ...}`` are decoded into the matching model at
the dispatch boundary; a mapping with an unrecognised type becomes an
``UnknownAction`` that the reducer treats as a no-op.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from webmarker.domain.exceptions import ActionValidationError
from webmarker.domain.models import Bookmark, Mark, Tag


class ActionType(str, Enum):
    """Names of the actions understood by the reducer."""

    INIT_BOOKMARKS = "INIT_BOOKMARKS"
    ADD_BOOKMARK = "ADD_BOOKMARK"
    UPDATE_BOOKMARK = "UPDATE_BOOKMARK"
    REMOVE_BOOKMARK = "REMOVE_BOOKMARK"
    INIT_MARKS = "INIT_MARKS"
    ADD_MARK = "ADD_MARK"
    UPDATE_MARK = "UPDATE_MARK"
    REMOVE_MARK = "REMOVE_MARK"
    INIT_TAGS = "INIT_TAGS"
    ADD_TAG = "ADD_TAG"
    REMOVE_TAG = "REMOVE_TAG"
    NAVIGATE_TO_TAB = "NAVIGATE_TO_TAB"
    SEARCH_VALUE_CHANGED = "SEARCH_VALUE_CHANGED"
    RESET_STATE = "RESET_STATE"


class Tab(str, Enum):
    """Named views of the popup."""

    ACCORDION = "accordion-view"
    TAGS = "tags-view"
    MARK = "mark-view"


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class InitBookmarks(_Action):
    type: Literal["INIT_BOOKMARKS"] = "INIT_BOOKMARKS"
    payload: tuple[Bookmark, ...] = ()


class AddBookmark(_Action):
    type: Literal["ADD_BOOKMARK"] = "ADD_BOOKMARK"
    payload: Bookmark


class UpdateBookmark(_Action):
    type: Literal["UPDATE_BOOKMARK"] = "UPDATE_BOOKMARK"
    payload: Bookmark


class RemoveBookmark(_Action):
    type: Literal["REMOVE_BOOKMARK"] = "REMOVE_BOOKMARK"
    payload: str = Field(min_length=1)


class InitMarks(_Action):
    type: Literal["INIT_MARKS"] = "INIT_MARKS"
    payload: tuple[Mark, ...] = ()


class AddMark(_Action):
    type: Literal["ADD_MARK"] = "ADD_MARK"
    payload: Mark


class UpdateMark(_Action):
    type: Literal["UPDATE_MARK"] = "UPDATE_MARK"
    payload: Mark


class RemoveMark(_Action):
    type: Literal["REMOVE_MARK"] = "REMOVE_MARK"
    payload: str = Field(min_length=1)


class InitTags(_Action):
    type: Literal["INIT_TAGS"] = "INIT_TAGS"
    payload: tuple[Tag, ...] = ()


class AddTag(_Action):
    type: Literal["ADD_TAG"] = "ADD_TAG"
    payload: Tag


class RemoveTag(_Action):
    type: Literal["REMOVE_TAG"] = "REMOVE_TAG"
    payload: Tag


class Navigation(BaseModel):
    model_config = ConfigDict(frozen=True)

    view: Tab
    search_value: str | None = None


class NavigateToTab(_Action):
    type: Literal["NAVIGATE_TO_TAB"] = "NAVIGATE_TO_TAB"
    payload: Navigation


class SearchValueChanged(_Action):
    type: Literal["SEARCH_VALUE_CHANGED"] = "SEARCH_VALUE_CHANGED"
    payload: str = ""


class ResetState(_Action):
    type: Literal["RESET_STATE"] = "RESET_STATE"
    payload: None = None


class UnknownAction(_Action):
    """An action whose type no reducer branch handles."""

    type: str
    payload: Any = None


KnownAction = Annotated[
    InitBookmarks
    | AddBookmark
    | UpdateBookmark
    | RemoveBookmark
    | InitMarks
    | AddMark
    | UpdateMark
    | RemoveMark
    | InitTags
    | AddTag
    | RemoveTag
    | NavigateToTab
    | SearchValueChanged
    | ResetState,
    Field(discriminator="type"),
]

Action = KnownAction | UnknownAction

_ACTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(KnownAction)
_KNOWN_TYPES = frozenset(item.value for item in ActionType)


def decode_action(raw: Any) -> Action:
    """Turn ``raw`` into a typed action.

    Args:
        raw: An action model or a mapping with ``type`` and optional ``payload``.

    Returns:
        The typed action.

    Raises:
        ActionValidationError: If the type is missing or the payload does not
            match the action's schema.
    """
    if isinstance(raw, _Action):
        return raw  # type: ignore[return-value]
    if not isinstance(raw, Mapping):
        raise ActionValidationError(f"Unsupported action object: {type(raw).__name__}")

    action_type = raw.get("type")
    if isinstance(action_type, Enum):
        action_type = action_type.value
    if not isinstance(action_type, str) or not action_type:
        raise ActionValidationError("Action type must be a non-empty string")

    if action_type not in _KNOWN_TYPES:
        return UnknownAction(type=action_type, payload=raw.get("payload"))

    data = {"type": action_type}
    if "payload" in raw:
        data["payload"] = raw["payload"]
    try:
        return _ACTION_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise ActionValidationError(
            f"Invalid payload for {action_type}",
            {"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc
