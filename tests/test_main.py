"""
Tests for the command-line entry point.
"""

import logging

import pytest

from marpdeck import main as cli
from marpdeck.logging_utils import RUN_LOG_NAME, reset_logging, setup_logging
from marpdeck.pipeline_render import assemble_markdown

from conftest import FakeProvider


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    yield
    reset_logging()


@pytest.fixture
def deck_file(tmp_path, intro_slide):
    path = tmp_path / "deck.md"
    path.write_text(assemble_markdown([intro_slide]), encoding="utf-8")
    return path


class TestCli:
    def test_help(self, capsys):
        assert cli.main(["help"]) == 0
        out = capsys.readouterr().out
        assert "Quick start" in out
        assert "modern-minimal" in out
        assert "Português (Brasil)" in out

    def test_preview_default_output(self, deck_file):
        assert cli.main(["preview", str(deck_file)]) == 0
        out = deck_file.with_name("deck.preview.html")
        assert 'class="slide full-bleed"' in out.read_text(encoding="utf-8")

    def test_export_explicit_output(self, deck_file, tmp_path):
        target = tmp_path / "out" / "slides.html"
        target.parent.mkdir()
        assert cli.main(["export", str(deck_file), "-o", str(target)]) == 0
        assert "marp-core" in target.read_text(encoding="utf-8")

    def test_missing_deck(self, tmp_path):
        assert cli.main(["preview", str(tmp_path / "nope.md")]) == 2

    def test_generate_requires_credentials(self, tmp_path, monkeypatch):
        for var in ("OPENAI_API_KEY", "MARPDECK_BACKEND_URL", "MARPDECK_BACKEND_TOKEN"):
            monkeypatch.delenv(var, raising=False)
        assert cli.main(["generate", "--topic", "Bees", "--out-dir", str(tmp_path)]) == 2

    def test_generate_end_to_end(self, tmp_path, monkeypatch, sample_json):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        provider = FakeProvider(text=sample_json)
        monkeypatch.setattr(cli, "init_provider", lambda cfg: provider)
        code = cli.main(["generate", "--topic", "Bees", "--slides", "3", "--seed", "1", "--out-dir", str(tmp_path)])
        assert code == 0
        assert (tmp_path / "deck.md").exists()
        assert (tmp_path / "preview.html").exists()
        run_log = (tmp_path / "run.log").read_text(encoding="utf-8")
        assert "Successfully decoded 3 slides" in run_log

    def test_generate_failure_exit_code(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setattr(cli, "init_provider", lambda cfg: FakeProvider(text="not json"))
        assert cli.main(["generate", "--topic", "Bees", "--out-dir", str(tmp_path)]) == 1

    def test_run_dir_from_topic(self, tmp_path):
        args = cli.parse_args(["generate", "--topic", "Urban beekeeping!", "--root-dir", str(tmp_path)])
        cfg = cli._config_from_args(args)
        assert cfg.out_dir == (tmp_path / "Urban_beekeeping").resolve()
        assert cfg.language == "pt-BR"
        assert cfg.generate_images

    def test_image_timeout_reaches_provider(self, tmp_path, monkeypatch, sample_json):
        """--image-timeout bounds each image request, not only the join."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        seen = []

        def fake_init(llm_cfg):
            seen.append(llm_cfg)
            return FakeProvider(text=sample_json)

        monkeypatch.setattr(cli, "init_provider", fake_init)
        code = cli.main(["generate", "--topic", "Bees", "--image-timeout", "5", "--out-dir", str(tmp_path)])
        assert code == 0
        assert seen[0].image_timeout == 5
        assert seen[0].effective_image_timeout == 5


class TestLogging:
    """Tests for the package logger setup."""

    def test_console_only(self):
        assert setup_logging() is None
        logger = logging.getLogger("marpdeck")
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO
        assert not logger.propagate

    def test_run_log_written(self, tmp_path):
        path = setup_logging(verbose=True, run_dir=tmp_path / "run")
        assert path == tmp_path / "run" / RUN_LOG_NAME
        logging.getLogger("marpdeck").debug("hello from a run")
        assert "[DEBUG] hello from a run" in path.read_text(encoding="utf-8")

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        first = setup_logging(run_dir=tmp_path / "a")
        second = setup_logging(run_dir=tmp_path / "b")
        logging.getLogger("marpdeck").info("only in b")
        assert len(logging.getLogger("marpdeck").handlers) == 2
        assert "only in b" not in first.read_text(encoding="utf-8")
        assert "only in b" in second.read_text(encoding="utf-8")

    def test_unwritable_run_dir_falls_back_to_console(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")
        assert setup_logging(run_dir=blocker) is None
        assert len(logging.getLogger("marpdeck").handlers) == 1
