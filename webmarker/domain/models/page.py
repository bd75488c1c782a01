"""The page a surface is currently attached to."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, field_validator


class PageContext(BaseModel):
    """Location and title of the active browser page."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        url = value.strip()
        if not url:
            raise ValueError("page url must not be empty")
        return url

    @property
    def origin(self) -> str:
        parsed = urlparse(self.url)
        if not parsed.scheme or not parsed.netloc:
            return ""
        return f"{parsed.scheme}://{parsed.netloc}"

    @property
    def display_title(self) -> str:
        """Title used for new bookmarks: the document title, else the host name."""
        if self.title.strip():
            return self.title.strip()
        return urlparse(self.url).netloc or self.url
