from __future__ import annotations

import html
import json
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .models import Slide, SlideLayout
from .pipeline_common import logger
from .preview import render_preview

FRONT_MATTER = "---\nmarp: true\ntheme: default\npaginate: true\n---\n\n"
SLIDE_DELIMITER = "---"
MARP_CORE_CDN = "https://cdn.jsdelivr.net/npm/@marp-team/marp-core/browser.js"

_DIRECTIVES: Dict[SlideLayout, str] = {
    SlideLayout.IMAGE_RIGHT: "![bg right:35%]({url})",
    SlideLayout.IMAGE_LEFT: "![bg left:35%]({url})",
    SlideLayout.FULL_BLEED: "![bg]({url})",
}


def image_directive(layout: SlideLayout, url: str) -> str:
    return _DIRECTIVES[layout].format(url=url)


def slide_block(slide: Slide) -> str:
    """Serialize one slide, delimiter included."""
    parts = [f"# {slide.title}"]
    if slide.image_url:
        parts.append(image_directive(slide.layout, slide.image_url))
    if slide.has_highlight:
        parts.append(f"> {slide.highlight}")
    parts.append(slide.content)
    parts.append(SLIDE_DELIMITER)
    return "".join(p + "\n\n" for p in parts)


def assemble_markdown(slides: Iterable[Slide]) -> str:
    """Build the Marp deck: front matter followed by one block per slide."""
    return FRONT_MATTER + "".join(slide_block(sl) for sl in slides)


def render_export_html(markdown: str) -> str:
    """Page that renders the deck in the browser with Marp Core from the CDN."""
    # html.escape keeps "</textarea>" inside the deck from closing the element.
    return f"""<!DOCTYPE html>
<html><body>
<script src="{MARP_CORE_CDN}"></script>
<textarea id="markdown" style="display:none">{html.escape(markdown, quote=False)}</textarea>
<div id="preview"></div>
<script>
  const marp = new Marp.Marp()
  const {{ html, css }} = marp.render(document.getElementById('markdown').value)
  document.getElementById('preview').innerHTML = html
  const style = document.createElement('style')
  style.textContent = css
  document.body.appendChild(style)
</script>
</body></html>
"""


class DeckStore:
    """Writes the artifacts of one run into ``out_dir``."""

    def __init__(self, out_dir: Path) -> None:
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def slugify_filename(s: str, max_len: int = 80) -> str:
        s = (s or "").strip()
        s = re.sub(r"[^a-zA-Z0-9]+", "_", s)
        s = s.strip("_")
        if not s:
            return "presentation"
        return s[:max_len]

    def _write(self, name: str, content: str) -> Path:
        path = self.out_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    def save_slides(self, slides: List[Slide]) -> Path:
        path = self.out_dir / "slides.json"
        with path.open("w", encoding="utf-8") as f:
            json.dump([sl.model_dump(mode="json") for sl in slides], f, indent=2, ensure_ascii=False)
        return path

    def save_markdown(self, markdown: str, name: str = "deck.md") -> Path:
        return self._write(name, markdown)

    def save_preview(self, markdown: str, name: str = "preview.html") -> Path:
        return self._write(name, render_preview(markdown))

    def save_export(self, markdown: str, name: str = "export.html") -> Path:
        return self._write(name, render_export_html(markdown))

    def save_all(self, markdown: str, slides: Optional[List[Slide]] = None) -> Dict[str, Path]:
        paths = {
            "markdown": self.save_markdown(markdown),
            "preview": self.save_preview(markdown),
            "export": self.save_export(markdown),
        }
        if slides is not None:
            paths["slides"] = self.save_slides(slides)
        for kind, p in paths.items():
            logger.info("Saved %s: %s", kind, p)
        return paths
