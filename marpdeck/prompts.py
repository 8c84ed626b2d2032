"""Prompt presets and the slide-structure prompt."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class ImageStyle:
    key: str
    display_name: str
    prompt_description: str


@dataclass(frozen=True)
class Language:
    code: str
    display_name: str
    prompt_name: str


IMAGE_STYLES: Dict[str, ImageStyle] = {
    s.key: s
    for s in [
        ImageStyle(
            "realism",
            "Realismo fotográfico",
            "realistic photography with natural lighting and authentic people",
        ),
        ImageStyle(
            "cinematic",
            "Cinemático",
            "cinematic still with dramatic lighting and shallow depth of field",
        ),
        ImageStyle(
            "watercolor",
            "Aquarela artística",
            "watercolor illustration with soft gradients and paper texture",
        ),
        ImageStyle(
            "modern-minimal",
            "Minimalista moderno",
            "minimalist flat illustration, clean vector shapes, muted palette",
        ),
        ImageStyle(
            "cyberpunk",
            "Cyberpunk neon",
            "futuristic cyberpunk aesthetic, neon lights, high contrast, moody atmosphere",
        ),
        ImageStyle(
            "collage",
            "Colagem editorial",
            "editorial collage mixing photography and graphic shapes with bold typography",
        ),
    ]
}

LANGUAGES: Dict[str, Language] = {
    lang.code: lang
    for lang in [
        Language("pt-BR", "Português (Brasil)", "Português brasileiro"),
        Language("en-US", "Inglês (EUA)", "English (United States)"),
        Language("es-ES", "Espanhol", "Español"),
        Language("fr-FR", "Francês", "Français"),
    ]
}

DEFAULT_LANGUAGE = "pt-BR"
DEFAULT_IMAGE_STYLE = "realism"


def get_image_style(key: str) -> ImageStyle:
    try:
        return IMAGE_STYLES[key]
    except KeyError:
        raise ValueError(f"Unknown image style {key!r}; choose from {', '.join(IMAGE_STYLES)}") from None


def get_language(code: str) -> Language:
    try:
        return LANGUAGES[code]
    except KeyError:
        raise ValueError(f"Unknown language {code!r}; choose from {', '.join(LANGUAGES)}") from None


def build_structure_prompt(
    topic: str,
    slide_count: int = 5,
    language: str = DEFAULT_LANGUAGE,
    image_style: str = DEFAULT_IMAGE_STYLE,
) -> str:
    """Build the prompt asking the text model for the slide JSON array.

    Args:
        topic (str): subject of the presentation.
        slide_count (int): number of slides to request.
        language (str): locale code from ``LANGUAGES``.
        image_style (str): key from ``IMAGE_STYLES``.

    Returns:
        str: the prompt text.
    """
    lang = get_language(language)
    style = get_image_style(image_style)
    return f"""
You are a presentation generator API.
Create a presentation outline for the topic: "{topic}".
Target audience: General public with mixed backgrounds.
Presentation language: {lang.prompt_name} (locale code {lang.code}). Use authentic localized tone and diacritics.
Number of slides: {slide_count}.

Requirements:
- Vary the tone and focus of each slide (data-driven, inspirational, practical advice, storytelling, etc.).
- Provide richer content: each slide's "content" must contain 4-6 bullet lines (each starting with "- ") with actionable insights, micro-examples, or statistics.
- Add a single-sentence "highlight" that summarizes the slide or shares a surprising fact.
- Choose a "visual_style" per slide from ["image-right","image-left","full-bleed"] to suggest how imagery should be laid out.
- Ensure "image_prompt" is vivid, specific, and stylistically varied (mention mood, color palette, composition, camera angle, etc.) but always base the aesthetic around "{style.prompt_description}".

CRITICAL: Return ONLY a valid JSON array. Do not wrap it in markdown code blocks like ```json. Do not add any intro text. Just the raw JSON array.

Format:
[
  {{
    "title": "Slide Title",
    "content": "- Bullet point 1\\n- Bullet point 2\\n- Bullet point 3",
    "highlight": "One-sentence key insight or statistic.",
    "visual_style": "image-right",
    "image_prompt": "Visual description for DALL-E"
  }}
]
""".strip()
