"""Pydantic models for slide records and normalized slides."""
from __future__ import annotations

import random
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SlideLayout(str, Enum):
    IMAGE_RIGHT = "image-right"
    IMAGE_LEFT = "image-left"
    FULL_BLEED = "full-bleed"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SlideLayout"]:
        """Return the layout named by ``value``, or None if it is not one."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @classmethod
    def random(cls, rng: random.Random) -> "SlideLayout":
        return rng.choice(list(cls))


class SlideRecord(BaseModel):
    """One slide as returned by the text model, before normalization."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    content: str
    image_prompt: str
    highlight: Optional[str] = None
    # The prompt asks for "visual_style"; "layout" is accepted as well.
    visual_style: Optional[str] = Field(default=None, alias="layout")


class Slide(BaseModel):
    title: str
    content: str
    image_prompt: str
    layout: SlideLayout
    highlight: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_record(cls, record: SlideRecord, rng: random.Random) -> "Slide":
        layout = SlideLayout.parse(record.visual_style) or SlideLayout.random(rng)
        return cls(
            title=record.title,
            content=record.content,
            image_prompt=record.image_prompt,
            layout=layout,
            highlight=record.highlight,
        )

    @property
    def has_highlight(self) -> bool:
        return bool(self.highlight)

    def with_image(self, url: Optional[str]) -> "Slide":
        return self.model_copy(update={"image_url": url})
