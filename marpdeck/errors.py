"""Exception hierarchy for deck generation.

Fatal failures (empty provider output, provider errors, unparseable slide
structure) halt the pipeline. Image failures are isolated per slide and only
ever show up inside an ``ImageResult``.
"""
from __future__ import annotations

from typing import Optional


class DeckError(Exception):
    """Base exception for all deck generation errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        msg = super().__str__()
        if self.cause is not None:
            msg += f" (caused by: {type(self.cause).__name__}: {self.cause})"
        return msg


class ProviderError(DeckError):
    """The AI provider call itself failed."""


class EmptyResponseError(DeckError):
    """The AI provider answered with no text at all."""

    def __init__(self, message: str = "AI returned empty response. Check your API key.") -> None:
        super().__init__(message)


class ExtractionError(DeckError):
    """Slide JSON could not be decoded or a record is missing a field."""

    def __init__(self, detail: str, cleaned: str) -> None:
        super().__init__(f"JSON parsing failed: {detail}")
        self.detail = detail
        self.cleaned = cleaned


class ImageGenerationError(DeckError):
    """A single slide's image request failed."""

    def __init__(self, index: int, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Image for slide {index + 1} failed: {message}", cause=cause)
        self.index = index
