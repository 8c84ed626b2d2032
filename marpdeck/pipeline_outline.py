from __future__ import annotations

import json
import random
import re
from typing import List, Optional

from pydantic import ValidationError

from .errors import EmptyResponseError, ExtractionError
from .models import Slide, SlideRecord
from .pipeline_common import logger

_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*")


def strip_code_fences(text: str) -> str:
    """Remove ``` fence markers (with or without a language tag), keeping their contents."""
    return _FENCE_RE.sub("", text or "")


def extract_json_candidate(raw: str) -> str:
    """Return the trimmed JSON array candidate found in ``raw``.

    The candidate runs from the first ``[`` to the last ``]``. When either
    bracket is missing the whole cleaned text is returned, which will then
    fail to decode.
    """
    t = strip_code_fences(raw)
    start = t.find("[")
    end = t.rfind("]")
    if start != -1 and end != -1 and end > start:
        t = t[start : end + 1]
        logger.debug("Extracted JSON array from response")
    else:
        logger.warning("No JSON array brackets found in response")
    return t.strip()


def _preview_text(s: str, max_len: int = 200) -> str:
    s = re.sub(r"\s+", " ", (s or "").strip())
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."


def decode_records(candidate: str) -> List[SlideRecord]:
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ExtractionError(str(exc), candidate) from exc

    if not isinstance(data, list):
        raise ExtractionError(f"expected a JSON array, got {type(data).__name__}", candidate)

    records: List[SlideRecord] = []
    for i, item in enumerate(data, 1):
        if not isinstance(item, dict):
            raise ExtractionError(f"slide {i} is not a JSON object", candidate)
        try:
            records.append(SlideRecord.model_validate(item))
        except ValidationError as exc:
            raise ExtractionError(f"slide {i}: {exc}", candidate) from exc
    return records


def parse_slides(raw: str, rng: Optional[random.Random] = None) -> List[Slide]:
    """Turn a raw text-model response into normalized slides.

    Args:
        raw (str): provider output, possibly fenced or wrapped in prose.
        rng (Optional[random.Random]): source for the layout fallback.

    Returns:
        List[Slide]: slides in the order of the JSON array.

    Raises:
        EmptyResponseError: ``raw`` is empty or whitespace.
        ExtractionError: the array could not be decoded or validated.
    """
    if not raw or not raw.strip():
        raise EmptyResponseError()
    rng = rng or random.Random()

    logger.debug("Response head: %s", _preview_text(raw))
    candidate = extract_json_candidate(raw)
    try:
        records = decode_records(candidate)
    except ExtractionError as exc:
        logger.error("JSON decode error: %s", exc.detail)
        logger.debug("Cleaned JSON:\n%s", exc.cleaned)
        raise

    slides = [Slide.from_record(r, rng) for r in records]
    logger.info("Decoded %s slides", len(slides))
    return slides
