"""AI provider clients (text + image) and the retrying invoke helper."""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .errors import ProviderError
from .image_gen_utils import generate_image_openai, generate_image_proxy

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


@dataclass
class LLMConfig:
    api_key: str = ""
    backend_url: str = ""
    backend_token: str = ""
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"
    timeout: float = 120
    # Caps each image request; unset means `timeout`.
    image_timeout: Optional[float] = None

    @property
    def effective_image_timeout(self) -> float:
        if self.image_timeout is None:
            return self.timeout
        return min(self.timeout, self.image_timeout)


class AIProvider(ABC):
    """Text and image generation capability used by the pipeline."""

    @abstractmethod
    def generate_text(self, model: str, prompt: str) -> str:
        ...

    @abstractmethod
    def generate_image(self, prompt: str) -> str:
        ...


def _completion_text(data: Dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProviderError("Chat provider returned an unexpected payload", cause=exc) from exc
    return content or ""


def _messages(prompt: str) -> List[Dict[str, str]]:
    return [{"role": "user", "content": prompt}]


class OpenAIProvider(AIProvider):
    def __init__(
        self,
        api_key: str,
        image_model: str = "dall-e-3",
        image_size: str = "1024x1024",
        timeout: float = 120,
        image_timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key
        self.image_model = image_model
        self.image_size = image_size
        self.timeout = timeout
        self.image_timeout = timeout if image_timeout is None else image_timeout

    def generate_text(self, model: str, prompt: str) -> str:
        if not self.api_key:
            raise ProviderError("OPENAI_API_KEY is required for OpenAI chat completions.")
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        payload = {"model": model, "messages": _messages(prompt)}
        try:
            r = requests.post(OPENAI_CHAT_URL, headers=headers, json=payload, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProviderError("Chat provider error", cause=exc) from exc
        return _completion_text(data)

    def generate_image(self, prompt: str) -> str:
        return generate_image_openai(
            prompt,
            api_key=self.api_key,
            model=self.image_model,
            size=self.image_size,
            timeout=self.image_timeout,
        )


class ProxyProvider(AIProvider):
    """Client for the bearer-token backend that forwards chat and image calls."""

    def __init__(self, base_url: str, token: str, timeout: float = 120, image_timeout: Optional[float] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.image_timeout = timeout if image_timeout is None else image_timeout

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}", "Content-Type": "application/json"}

    def health(self) -> bool:
        try:
            r = requests.get(f"{self.base_url}/health", timeout=10)
            return r.ok and r.json().get("status") == "ok"
        except (requests.RequestException, ValueError):
            return False

    def generate_text(self, model: str, prompt: str) -> str:
        payload = {"model": model, "messages": _messages(prompt)}
        try:
            r = requests.post(f"{self.base_url}/api/chat", headers=self._headers(), json=payload, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProviderError("Chat provider error", cause=exc) from exc
        return _completion_text(data)

    def generate_image(self, prompt: str) -> str:
        return generate_image_proxy(prompt, self.base_url, self.token, timeout=self.image_timeout)


def init_provider(cfg: LLMConfig) -> AIProvider:
    if cfg.backend_url:
        return ProxyProvider(
            cfg.backend_url,
            cfg.backend_token,
            timeout=cfg.timeout,
            image_timeout=cfg.effective_image_timeout,
        )
    return OpenAIProvider(
        cfg.api_key,
        image_model=cfg.image_model,
        image_size=cfg.image_size,
        timeout=cfg.timeout,
        image_timeout=cfg.effective_image_timeout,
    )


def safe_invoke(
    logger: logging.Logger,
    provider: AIProvider,
    prompt: str,
    model: str,
    retries: int = 1,
    backoff: float = 1.0,
    debug: bool = False,
) -> str:
    """Call ``provider.generate_text`` with up to ``retries`` attempts.

    The last ``ProviderError`` is re-raised once attempts run out. Empty text
    is returned unchanged; deciding what that means is up to the caller.
    """
    attempts = max(1, retries)
    attempt = 1
    while True:
        try:
            out = provider.generate_text(model, prompt)
            if debug:
                logger.debug("LLM attempt %s returned %s chars", attempt, len(out or ""))
            return out or ""
        except ProviderError as exc:
            logger.warning("LLM attempt %s/%s failed: %s", attempt, attempts, exc)
            if attempt >= attempts:
                raise
        time.sleep(backoff * attempt)
        attempt += 1
