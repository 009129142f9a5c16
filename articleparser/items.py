"""Pydantic schema for extracted articles."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ParsedContent(BaseModel):
    """Canonical output record for one extracted article."""

    # Identity
    url: str
    links: list[str] = Field(default_factory=list)

    # Metadata
    title: str = ""
    description: str = ""
    author: str = ""
    source: str = ""
    published: str = ""
    meta_type: str = ""

    # Media
    image: str = ""
    favicon: str = ""

    # Content
    content: str = ""

    # Stats
    ttr: int = Field(default=0, ge=0)  # seconds

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v or ""
