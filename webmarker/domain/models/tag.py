"""Tag model and the shared base for tagged aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webmarker.core.tag_utils import dedupe_names, tag_key

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Self


class Tag(BaseModel):
    """A tag in the tag dictionary.

    ``id`` is ``None`` for a tag typed by the user that the backend has not
    assigned an identifier to yet.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str | None = None
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> str:
        return str(value or "").strip()

    @property
    def key(self) -> str:
        return tag_key(self.name)


def coerce_tags(value: Any) -> list[Any]:
    """Accept tag objects, dicts or plain names and normalise to Tag-compatible items."""
    if value is None:
        return []
    if isinstance(value, (str, Tag, dict)):
        value = [value]
    items: list[Any] = []
    for item in value:
        if isinstance(item, str):
            items.append(Tag(name=item))
        else:
            items.append(item)
    return items


def build_tags(names: Iterable[str], known: Iterable[Tag] = ()) -> tuple[Tag, ...]:
    """Build tags for ``names``, reusing ids of ``known`` tags with the same name."""
    by_key = {tag.key: tag for tag in known}
    tags: list[Tag] = []
    for name in dedupe_names(names):
        existing = by_key.get(tag_key(name))
        tags.append(Tag(id=existing.id if existing else None, name=name))
    return tuple(tags)


class TaggedEntity(BaseModel):
    """Common shape of bookmarks and marks: identity, page url and tags."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    url: str
    origin: str = ""
    title: str = ""
    created_at: int = Field(default=0, alias="createdAt")
    tags: tuple[Tag, ...] = Field(default_factory=tuple)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[Any]:
        return coerce_tags(value)

    @property
    def tag_names(self) -> list[str]:
        return [tag.name for tag in self.tags]

    def with_tags(self, tags: Iterable[Tag | str]) -> Self:
        """Return a copy carrying ``tags``; names are de-duplicated case-insensitively."""
        items = list(tags)
        known = [tag for tag in items if isinstance(tag, Tag)] + list(self.tags)
        names = [tag.name if isinstance(tag, Tag) else tag for tag in items]
        return self.model_copy(update={"tags": build_tags(names, known)})

    def to_wire(self) -> dict[str, Any]:
        """Serialise with the backend's camelCase field names."""
        return self.model_dump(by_alias=True, mode="json")
