"""
Pytest configuration and shared fixtures.
"""

import json
import random
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from marpdeck.errors import ProviderError
from marpdeck.llm import AIProvider
from marpdeck.models import Slide, SlideLayout


SAMPLE_RECORDS: List[Dict] = [
    {
        "title": "Intro",
        "content": "- a\n- b",
        "highlight": "Key fact.",
        "visual_style": "full-bleed",
        "image_prompt": "x",
    },
    {
        "title": "Why it matters",
        "content": "- **Bold** claim\n- _subtle_ point",
        "visual_style": "image-right",
        "image_prompt": "a city skyline at dusk",
    },
    {
        "title": "Next steps",
        "content": "- Plan\n- Do\n- Check",
        "highlight": "",
        "visual_style": "image-left",
        "image_prompt": "a winding path",
    },
]


class FakeProvider(AIProvider):
    """In-memory provider; records every call."""

    def __init__(
        self,
        text: str = "",
        text_error: Optional[Exception] = None,
        image_fn: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.text = text
        self.text_error = text_error
        self.image_fn = image_fn or (lambda prompt: f"https://img.example/{abs(hash(prompt))}.png")
        self.text_calls: List[tuple] = []
        self.image_calls: List[str] = []

    def generate_text(self, model: str, prompt: str) -> str:
        self.text_calls.append((model, prompt))
        if self.text_error is not None:
            raise self.text_error
        return self.text

    def generate_image(self, prompt: str) -> str:
        self.image_calls.append(prompt)
        return self.image_fn(prompt)


@pytest.fixture
def sample_json() -> str:
    return json.dumps(SAMPLE_RECORDS, ensure_ascii=False)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def intro_slide() -> Slide:
    return Slide(
        title="Intro",
        content="- a\n- b",
        highlight="Key fact.",
        layout=SlideLayout.FULL_BLEED,
        image_prompt="x",
        image_url="https://img/1.png",
    )


@pytest.fixture
def plain_slides() -> List[Slide]:
    return [
        Slide(title=f"Slide {i}", content=f"- point {i}", layout=layout, image_prompt=f"prompt {i}")
        for i, layout in enumerate(list(SlideLayout) * 2, 1)
    ]


@pytest.fixture
def fake_provider(sample_json) -> FakeProvider:
    return FakeProvider(text=sample_json)


@pytest.fixture
def failing_provider() -> FakeProvider:
    return FakeProvider(text_error=ProviderError("Chat provider error"))
