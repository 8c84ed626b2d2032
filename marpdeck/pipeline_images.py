from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError, as_completed
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .errors import ImageGenerationError
from .models import Slide
from .pipeline_common import TQDM_NCOLS, logger

ImageFn = Callable[[str], str]
# (completed, total) after every settled request
ImageProgressFn = Callable[[int, int], None]


@dataclass(frozen=True)
class ImageResult:
    index: int
    url: Optional[str] = None
    error: Optional[ImageGenerationError] = None

    @property
    def ok(self) -> bool:
        return self.url is not None


def _generate_one(index: int, prompt: str, generate_image: ImageFn) -> ImageResult:
    try:
        url = generate_image(prompt)
    except Exception as exc:
        logger.exception("Image generation failed for slide %s", index + 1)
        return ImageResult(index, error=ImageGenerationError(index, str(exc), cause=exc))
    if not url:
        return ImageResult(index, error=ImageGenerationError(index, "empty image reference"))
    return ImageResult(index, url=url)


def attach_images(
    slides: Sequence[Slide],
    generate_image: ImageFn,
    on_progress: Optional[ImageProgressFn] = None,
    max_workers: int = 8,
    timeout: Optional[float] = None,
) -> Tuple[List[Slide], List[ImageResult]]:
    """Generate one image per slide concurrently and join on all of them.

    Args:
        slides (Sequence[Slide]): slides carrying ``image_prompt``.
        generate_image (ImageFn): prompt -> image URL; may raise.
        on_progress (Optional[ImageProgressFn]): called as (completed, total)
            from the calling thread after each request settles.
        max_workers (int): thread pool size.
        timeout (Optional[float]): deadline in seconds for the whole batch;
            requests still pending at the deadline count as failed. Their
            threads are not joined here, so ``generate_image`` should bound
            its own call (see ``LLMConfig.image_timeout``).

    Returns:
        Tuple[List[Slide], List[ImageResult]]: updated slides and one result
        per slide, both in the original order.
    """
    total = len(slides)
    slots: List[Optional[ImageResult]] = [None] * total
    if total == 0:
        return [], []

    done = 0
    pool = ThreadPoolExecutor(max_workers=max(1, min(max_workers, total)))
    try:
        futures = {
            pool.submit(_generate_one, i, sl.image_prompt, generate_image): i
            for i, sl in enumerate(slides)
        }
        with tqdm(total=total, desc="Images", unit="slide", ncols=TQDM_NCOLS, dynamic_ncols=False) as bar:
            try:
                for fut in as_completed(futures, timeout=timeout):
                    i = futures[fut]
                    slots[i] = fut.result()
                    done += 1
                    bar.update(1)
                    if on_progress:
                        on_progress(done, total)
            except FutureTimeoutError:
                for fut, i in futures.items():
                    if slots[i] is not None:
                        continue
                    if fut.done() and not fut.cancelled():
                        slots[i] = fut.result()
                    else:
                        fut.cancel()
                        logger.error("Image generation timed out for slide %s", i + 1)
                        slots[i] = ImageResult(i, error=ImageGenerationError(i, f"timed out after {timeout}s"))
                    done += 1
                    bar.update(1)
                    if on_progress:
                        on_progress(done, total)
    finally:
        # Timed-out requests run until their own HTTP timeout; not joined here.
        pool.shutdown(wait=timeout is None, cancel_futures=True)

    results = [r for r in slots if r is not None]
    updated = [sl.with_image(r.url) for sl, r in zip(slides, results)]
    failed = sum(1 for r in results if not r.ok)
    if failed:
        logger.warning("%s of %s slide images failed; those slides render without images.", failed, total)
    return updated, results
