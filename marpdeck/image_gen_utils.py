"""Image generation utilities."""
from __future__ import annotations

from typing import Any, Dict

import requests

from .errors import ProviderError

OPENAI_IMAGES_URL = "https://api.openai.com/v1/images/generations"


def _image_url_from_response(data: Dict[str, Any]) -> str:
    items = data.get("data") or []
    url = items[0].get("url") if items and isinstance(items[0], dict) else None
    if not url:
        raise ProviderError("Image provider did not return URL")
    return url


def generate_image_openai(
    prompt: str,
    api_key: str,
    model: str = "dall-e-3",
    size: str = "1024x1024",
    timeout: float = 90,
) -> str:
    """Generate one image with the OpenAI Images API and return its URL."""
    if not api_key:
        raise ProviderError("OPENAI_API_KEY is required for OpenAI image generation.")
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    payload = {
        "model": model,
        "prompt": prompt,
        "n": 1,
        "size": size,
    }
    try:
        r = requests.post(OPENAI_IMAGES_URL, headers=headers, json=payload, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as exc:
        raise ProviderError("Image provider error", cause=exc) from exc
    return _image_url_from_response(data)


def generate_image_proxy(prompt: str, base_url: str, token: str, timeout: float = 90) -> str:
    """Generate one image through the backend proxy (``POST /api/image``)."""
    headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
    url = base_url.rstrip("/") + "/api/image"
    try:
        r = requests.post(url, headers=headers, json={"prompt": prompt}, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as exc:
        raise ProviderError("Image provider error", cause=exc) from exc
    url = data.get("url") if isinstance(data, dict) else None
    if not url:
        raise ProviderError("Image provider did not return URL")
    return url
