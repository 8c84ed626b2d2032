"""
Tests for the concurrent image attachment stage.
"""

import threading
import time

from marpdeck.errors import ImageGenerationError
from marpdeck.pipeline_images import attach_images


def _url_for(prompt: str) -> str:
    return "https://img/" + prompt.replace(" ", "_") + ".png"


class TestAttachImages:
    """Tests for fan-out, join and failure isolation."""

    def test_all_succeed(self, plain_slides):
        slides, results = attach_images(plain_slides, _url_for)
        assert len(slides) == len(plain_slides)
        assert [r.index for r in results] == list(range(len(plain_slides)))
        assert all(r.ok for r in results)
        for sl in slides:
            assert sl.image_url == _url_for(sl.image_prompt)

    def test_one_failure_is_isolated(self, plain_slides):
        """A failing request leaves only that slide without an image."""
        bad = plain_slides[2].image_prompt

        def gen(prompt):
            if prompt == bad:
                raise RuntimeError("content policy violation")
            return _url_for(prompt)

        slides, results = attach_images(plain_slides, gen)
        assert len(slides) == len(plain_slides)
        assert slides[2].image_url is None
        assert not results[2].ok
        assert isinstance(results[2].error, ImageGenerationError)
        assert results[2].error.index == 2
        assert "content policy violation" in str(results[2].error)
        for i, sl in enumerate(slides):
            if i != 2:
                assert sl.image_url is not None

    def test_empty_url_counts_as_failure(self, plain_slides):
        slides, results = attach_images(plain_slides[:2], lambda p: "")
        assert all(not r.ok for r in results)
        assert all(sl.image_url is None for sl in slides)

    def test_order_preserved_despite_completion_order(self, plain_slides):
        """Slow early requests do not reorder slides."""
        delays = {sl.image_prompt: 0.05 * (len(plain_slides) - i) for i, sl in enumerate(plain_slides)}

        def gen(prompt):
            time.sleep(delays[prompt])
            return _url_for(prompt)

        slides, _ = attach_images(plain_slides, gen, max_workers=len(plain_slides))
        assert [s.title for s in slides] == [s.title for s in plain_slides]
        assert [s.image_url for s in slides] == [_url_for(s.image_prompt) for s in plain_slides]

    def test_progress_is_monotonic_and_complete(self, plain_slides):
        calls = []
        attach_images(plain_slides, _url_for, on_progress=lambda done, total: calls.append((done, total)))
        total = len(plain_slides)
        assert calls == [(i, total) for i in range(1, total + 1)]

    def test_progress_counts_failures(self, plain_slides):
        calls = []

        def gen(prompt):
            raise RuntimeError("boom")

        attach_images(plain_slides[:3], gen, on_progress=lambda d, t: calls.append(d))
        assert calls == [1, 2, 3]

    def test_requests_run_concurrently(self, plain_slides):
        """All requests are in flight at the same time."""
        barrier = threading.Barrier(len(plain_slides), timeout=5)

        def gen(prompt):
            barrier.wait()
            return _url_for(prompt)

        _, results = attach_images(plain_slides, gen, max_workers=len(plain_slides))
        assert all(r.ok for r in results)

    def test_input_not_mutated(self, plain_slides):
        attach_images(plain_slides, _url_for)
        assert all(sl.image_url is None for sl in plain_slides)

    def test_empty_input(self):
        calls = []
        assert attach_images([], lambda p: calls.append(p)) == ([], [])
        assert calls == []

    def test_deadline_marks_pending_as_failed(self, plain_slides):
        release = threading.Event()
        slow = plain_slides[0].image_prompt

        def gen(prompt):
            if prompt == slow:
                release.wait(5)
            return _url_for(prompt)

        try:
            slides, results = attach_images(plain_slides[:3], gen, max_workers=3, timeout=0.5)
        finally:
            release.set()
        assert slides[0].image_url is None
        assert "timed out" in str(results[0].error)
        assert slides[1].image_url and slides[2].image_url
