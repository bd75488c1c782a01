"""Bookmark aggregate."""

from __future__ import annotations

from pydantic import Field

from webmarker.domain.models.tag import TaggedEntity


class Bookmark(TaggedEntity):
    """A starred or saved page."""

    is_starred: bool = Field(default=False, alias="isStarred")
