"""Mark aggregate."""

from __future__ import annotations

from pydantic import ConfigDict

from webmarker.domain.models.tag import TaggedEntity


class Mark(TaggedEntity):
    """A highlighted passage on a page.

    Fields the backend sends beyond the common ones (ranges, colours, ...)
    are kept so that an update sends them back unchanged.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    text: str = ""
