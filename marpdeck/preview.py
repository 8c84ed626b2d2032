"""Self-contained HTML preview of a Marp deck.

The deck text is re-parsed rather than read from ``Slide`` objects, so a
hand-edited deck previews the same way as a freshly generated one. Only the
subset of markdown the assembler emits is understood.

Known limitation: a content line consisting of ``---`` splits the slide, and
a content line that looks like a ``![bg ...](https://...)`` directive is
treated as the slide's image.
"""
from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import List, Optional

ACCENT_PALETTE = ["#EEF2FF", "#FFF7ED", "#ECFDF3", "#FDF2F8", "#F0F9FF", "#E0F2FE", "#FEF3C7"]
SLIDE_SEPARATOR = "\n---\n"

SIDE_IMAGE_RE = re.compile(r"!\[bg\s+(left|right):\d+%\]\((https://[^)]+)\)")
BACKGROUND_IMAGE_RE = re.compile(r"!\[bg\]\((https://[^)]+)\)")
BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
ITALIC_RE = re.compile(r"_([^_]+)_")

STYLESHEET = """
body {
    margin: 0;
    padding: 20px;
    background: #f5f5f5;
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif;
}
.slide {
    background: var(--accent, white);
    margin: 20px auto;
    padding: 40px;
    max-width: 960px;
    min-height: 540px;
    box-shadow: 0 4px 10px rgba(0,0,0,0.1);
    border-radius: 12px;
    display: flex;
    gap: 40px;
    position: relative;
}
.slide::before {
    content: "Slide " attr(data-slide);
    position: absolute;
    top: 10px;
    right: 20px;
    font-size: 12px;
    color: #999;
}
.content {
    flex: 1;
}
.slide.image-left {
    flex-direction: row-reverse;
}
.slide.full-bleed .content {
    background: rgba(0,0,0,0.25);
    padding: 20px;
    border-radius: 12px;
}
.slide.full-bleed .content h1,
.slide.full-bleed .content h2,
.slide.full-bleed .content li,
.slide.full-bleed .content p,
.slide.full-bleed .content strong {
    color: #fff;
}
.image {
    width: 35%;
    display: flex;
    align-items: center;
}
.image img {
    width: 100%;
    border-radius: 8px;
    box-shadow: 0 8px 20px rgba(0,0,0,0.15);
}
h1 {
    font-size: 32px;
    margin: 0 0 20px 0;
    color: #1f2937;
}
h2 {
    font-size: 24px;
    margin: 0 0 15px 0;
    color: #374151;
}
ul {
    list-style: none;
    padding: 0;
    margin: 20px 0;
}
li {
    padding: 8px 0;
    color: #4b5563;
    font-size: 16px;
    position: relative;
    padding-left: 20px;
}
li::before {
    content: "•";
    position: absolute;
    left: 0;
    color: #6366f1;
}
.highlight {
    padding: 12px 16px;
    background: rgba(255,255,255,0.85);
    border-left: 4px solid #4338ca;
    border-radius: 8px;
    margin: 16px 0;
    font-weight: 600;
}
.slide.full-bleed .highlight {
    background: rgba(0,0,0,0.35);
    border-color: #fff;
    color: #fff;
}
""".strip()


@dataclass
class PreviewSlide:
    ordinal: int
    body: str
    image_side: Optional[str] = None
    image_url: Optional[str] = None
    background_url: Optional[str] = None

    @property
    def accent(self) -> str:
        return ACCENT_PALETTE[(self.ordinal - 1) % len(ACCENT_PALETTE)]

    @property
    def css_classes(self) -> List[str]:
        classes = ["slide"]
        if self.image_side:
            classes.append(f"image-{self.image_side}")
        if self.background_url:
            classes.append("full-bleed")
        return classes

    @property
    def style(self) -> str:
        style = f"--accent:{self.accent};"
        if self.background_url:
            style += (
                "background-image: linear-gradient(120deg, rgba(0,0,0,0.45), rgba(0,0,0,0.65)), "
                f"url({self.background_url});background-size: cover;background-position: center;color:#fff;"
            )
        return style

    @property
    def side_image(self) -> Optional[str]:
        if self.image_url and not self.background_url:
            return self.image_url
        return None


def strip_front_matter(markdown: str) -> str:
    if not markdown.startswith("---"):
        return markdown
    end = markdown.find("\n---", 3)
    if end == -1:
        return markdown
    return markdown[end + len("\n---") :]


def split_segments(markdown: str) -> List[str]:
    """Slide segments of a deck, front matter removed, blank ones included."""
    body = strip_front_matter(markdown.replace("\r\n", "\n"))
    return body.split(SLIDE_SEPARATOR)


def _extract_directive(segment: str, ordinal: int) -> PreviewSlide:
    m = SIDE_IMAGE_RE.search(segment)
    if m:
        body = segment[: m.start()] + segment[m.end() :]
        return PreviewSlide(ordinal, body, image_side=m.group(1), image_url=m.group(2))
    m = BACKGROUND_IMAGE_RE.search(segment)
    if m:
        body = segment[: m.start()] + segment[m.end() :]
        return PreviewSlide(ordinal, body, background_url=m.group(1))
    return PreviewSlide(ordinal, segment)


def parse_deck(markdown: str) -> List[PreviewSlide]:
    slides: List[PreviewSlide] = []
    for segment in split_segments(markdown):
        if not segment.strip():
            continue
        slides.append(_extract_directive(segment, len(slides) + 1))
    return slides


def apply_inline_formatting(text: str) -> str:
    text = BOLD_RE.sub(r"<strong>\1</strong>", text)
    text = ITALIC_RE.sub(r"<em>\1</em>", text)
    return text


def _inline(text: str) -> str:
    return apply_inline_formatting(html.escape(text, quote=False))


def markdown_to_html(text: str) -> str:
    parts: List[str] = []
    items: List[str] = []

    def flush_list() -> None:
        if items:
            parts.append("<ul>" + "".join(f"<li>{i}</li>" for i in items) + "</ul>")
            items.clear()

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            flush_list()
            continue
        if trimmed.startswith("# "):
            flush_list()
            parts.append(f"<h1>{_inline(trimmed[2:])}</h1>")
        elif trimmed.startswith("## "):
            flush_list()
            parts.append(f"<h2>{_inline(trimmed[3:])}</h2>")
        elif trimmed.startswith("> "):
            flush_list()
            parts.append(f'<p class="highlight">{_inline(trimmed[2:])}</p>')
        elif trimmed.startswith("- "):
            items.append(_inline(trimmed[2:]))
        else:
            flush_list()
            parts.append(f"<p>{_inline(trimmed)}</p>")

    flush_list()
    return "".join(parts)


def render_slide(slide: PreviewSlide) -> str:
    image_block = ""
    if slide.side_image:
        image_block = f'<div class="image"><img src="{html.escape(slide.side_image)}" /></div>'
    return (
        f'<div class="{" ".join(slide.css_classes)}" data-slide="{slide.ordinal}" '
        f'style="{html.escape(slide.style)}">\n'
        f'    <div class="content">\n'
        f"        {markdown_to_html(slide.body)}\n"
        f"    </div>\n"
        f"    {image_block}\n"
        f"</div>\n"
    )


def render_preview(markdown: str) -> str:
    """Render the deck markdown as a standalone HTML page."""
    slides_html = "".join(render_slide(sl) for sl in parse_deck(markdown))
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <style>
{STYLESHEET}
    </style>
</head>
<body>
{slides_html}
</body>
</html>
"""
