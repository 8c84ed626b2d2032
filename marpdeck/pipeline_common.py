from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

logger = logging.getLogger("marpdeck")
TQDM_NCOLS = 100


@dataclass
class RunConfig:
    topic: str
    out_dir: Path
    slide_count: int = 5
    language: str = "pt-BR"
    image_style: str = "realism"
    text_model: str = "gpt-4o"
    generate_images: bool = True
    max_image_workers: int = 8
    image_timeout: Optional[float] = None
    text_retries: int = 1
    seed: Optional[int] = None
    verbose: bool = False


@dataclass(frozen=True)
class ProgressEvent:
    step: str
    progress: float
    is_generating: bool
    message: str = ""
    # Set only on events published by GenerationProgress.log().
    log_line: str = ""
    debug_log: str = ""


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class GenerationProgress:
    """Observable progress state for one generation run.

    Owned by the caller of the pipeline. Every mutation happens under a lock
    and subscribers receive an immutable snapshot, so observers on another
    thread never see a half-applied update.
    """

    is_generating: bool = False
    current_step: str = ""
    progress: float = 0.0
    debug_log: str = ""
    _subscribers: List[ProgressCallback] = field(default_factory=list, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def subscribe(self, callback: ProgressCallback) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def snapshot(self, message: str = "", log_line: str = "") -> ProgressEvent:
        with self._lock:
            return ProgressEvent(
                step=self.current_step,
                progress=self.progress,
                is_generating=self.is_generating,
                message=message,
                log_line=log_line,
                debug_log=self.debug_log,
            )

    def _publish(self, event: ProgressEvent) -> None:
        for cb in list(self._subscribers):
            cb(event)

    def update(
        self,
        step: Optional[str] = None,
        progress: Optional[float] = None,
        is_generating: Optional[bool] = None,
        message: str = "",
    ) -> ProgressEvent:
        with self._lock:
            if step is not None:
                self.current_step = step
            if progress is not None:
                self.progress = max(0.0, min(1.0, progress))
            if is_generating is not None:
                self.is_generating = is_generating
            event = self.snapshot(message)
            self._publish(event)
        return event

    def log(self, message: str) -> ProgressEvent:
        """Append a timestamped line to the debug log and publish it."""
        line = f"[{datetime.now().strftime('%H:%M:%S')}] {message}"
        with self._lock:
            self.debug_log += line + "\n"
            event = self.snapshot(log_line=line)
            self._publish(event)
        logger.info(message)
        return event

    def reset_log(self) -> None:
        with self._lock:
            self.debug_log = ""
