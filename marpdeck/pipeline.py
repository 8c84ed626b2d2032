"""Deck generation pipeline: prompt -> slides -> images -> markdown."""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .errors import EmptyResponseError
from .llm import AIProvider, safe_invoke
from .models import Slide
from .pipeline_common import GenerationProgress, RunConfig, logger
from .pipeline_images import ImageResult, attach_images
from .pipeline_outline import parse_slides
from .pipeline_render import DeckStore, assemble_markdown
from .prompts import build_structure_prompt, get_image_style, get_language


@dataclass
class DeckResult:
    markdown: str
    slides: List[Slide]
    image_results: List[ImageResult] = field(default_factory=list)
    paths: Dict[str, Path] = field(default_factory=dict)

    @property
    def failed_images(self) -> List[int]:
        return [r.index for r in self.image_results if not r.ok]


class DeckPipeline:
    def __init__(
        self,
        cfg: RunConfig,
        provider: AIProvider,
        progress: Optional[GenerationProgress] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.progress = progress or GenerationProgress()
        self.rng = rng or random.Random(cfg.seed)

    def sanity_checks(self) -> None:
        if not self.cfg.topic.strip():
            raise ValueError("topic must not be empty")
        if self.cfg.slide_count < 1:
            raise ValueError("slide_count must be >= 1")
        get_language(self.cfg.language)
        get_image_style(self.cfg.image_style)

    def generate_structure(self) -> List[Slide]:
        p = self.progress
        lang = get_language(self.cfg.language)
        p.log(f"Topic: {self.cfg.topic}")
        p.log(f"Slide count: {self.cfg.slide_count}")
        p.log(f"Language: {lang.prompt_name} ({lang.code})")
        p.log(f"Image style: {get_image_style(self.cfg.image_style).prompt_description}")
        p.update(step="Refining concept...", progress=0.1)

        prompt = build_structure_prompt(
            self.cfg.topic,
            slide_count=self.cfg.slide_count,
            language=self.cfg.language,
            image_style=self.cfg.image_style,
        )
        p.log(f"Sending request to text model ({self.cfg.text_model})...")
        raw = safe_invoke(
            logger,
            self.provider,
            prompt,
            self.cfg.text_model,
            retries=self.cfg.text_retries,
            debug=self.cfg.verbose,
        )
        if not raw.strip():
            p.log("ERROR: Response is empty")
            raise EmptyResponseError()
        p.log(f"Received response ({len(raw)} chars)")

        p.update(step="Designing visuals...", progress=0.3)
        slides = parse_slides(raw, rng=self.rng)
        p.log(f"Successfully decoded {len(slides)} slides")
        return slides

    def generate_images(self, slides: List[Slide]) -> tuple[List[Slide], List[ImageResult]]:
        p = self.progress

        def _on_progress(done: int, total: int) -> None:
            p.update(step=f"Rendering slide {done}/{total}...", progress=0.3 + 0.6 * (done / total))

        return attach_images(
            slides,
            self.provider.generate_image,
            on_progress=_on_progress,
            max_workers=self.cfg.max_image_workers,
            timeout=self.cfg.image_timeout,
        )

    def run(self, save: bool = True) -> DeckResult:
        p = self.progress
        p.reset_log()
        p.update(step="Starting...", progress=0.0, is_generating=True)
        p.log("Starting presentation generation")
        try:
            self.sanity_checks()
            slides = self.generate_structure()

            results: List[ImageResult] = []
            if self.cfg.generate_images and slides:
                slides, results = self.generate_images(slides)
                for r in results:
                    if not r.ok:
                        p.log(f"Image failed for slide {r.index + 1}: {r.error}")

            p.update(step="Finalizing...", progress=0.95)
            markdown = assemble_markdown(slides)
            result = DeckResult(markdown=markdown, slides=slides, image_results=results)
            if save:
                result.paths = DeckStore(self.cfg.out_dir).save_all(markdown, slides)
        except Exception as exc:
            p.log(f"ERROR: {exc}")
            p.update(step="Failed", is_generating=False, message=str(exc))
            raise

        p.update(step="Done", progress=1.0, is_generating=False)
        return result
