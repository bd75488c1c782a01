"""Entity models shared by the store, services and surfaces."""

from webmarker.domain.models.bookmark import Bookmark
from webmarker.domain.models.mark import Mark
from webmarker.domain.models.page import PageContext
from webmarker.domain.models.tag import Tag, TaggedEntity, build_tags
from webmarker.domain.models.user import LoginUserDto

__all__ = [
    "Bookmark",
    "LoginUserDto",
    "Mark",
    "PageContext",
    "Tag",
    "TaggedEntity",
    "build_tags",
]
