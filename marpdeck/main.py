"""CLI entrypoint for generating and previewing Marp decks from the terminal."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

try:
    from . import __version__
    from .errors import DeckError, ExtractionError
    from .llm import LLMConfig, init_provider
    from .logging_utils import setup_logging
    from .pipeline import DeckPipeline
    from .pipeline_common import GenerationProgress, ProgressEvent, RunConfig
    from .pipeline_render import DeckStore, render_export_html
    from .preview import render_preview
    from .prompts import IMAGE_STYLES, LANGUAGES
except ImportError:
    sys.path.append(str(Path(__file__).resolve().parent.parent))
    from marpdeck import __version__
    from marpdeck.errors import DeckError, ExtractionError
    from marpdeck.llm import LLMConfig, init_provider
    from marpdeck.logging_utils import setup_logging
    from marpdeck.pipeline import DeckPipeline
    from marpdeck.pipeline_common import GenerationProgress, ProgressEvent, RunConfig
    from marpdeck.pipeline_render import DeckStore, render_export_html
    from marpdeck.preview import render_preview
    from marpdeck.prompts import IMAGE_STYLES, LANGUAGES

logger = logging.getLogger("marpdeck")


def print_helper() -> None:
    print("marpdeck help")
    print("")
    print("Quick start:")
    print('  marpdeck generate --topic "Urban beekeeping" --slides 6 --language en-US')
    print('  marpdeck generate --topic "Rust for Python devs" --image-style modern-minimal --no-images')
    print("  marpdeck preview ~/marpdeck_runs/Urban_beekeeping/deck.md")
    print("  marpdeck export ~/marpdeck_runs/Urban_beekeeping/deck.md -o slides.html")
    print("")
    print("Environment:")
    print("  OPENAI_API_KEY          Key for direct OpenAI calls")
    print("  MARPDECK_BACKEND_URL    Use the backend proxy at this URL instead")
    print("  MARPDECK_BACKEND_TOKEN  Bearer token for the backend proxy")
    print("  MARPDECK_ROOT_DIR       Root runs dir (default: ~/marpdeck_runs)")
    print("")
    print("Image styles:")
    for key, style in IMAGE_STYLES.items():
        print(f"  {key:<16}{style.display_name}")
    print("Languages:")
    for code, lang in LANGUAGES.items():
        print(f"  {code:<16}{lang.display_name}")
    print("")
    print("Full options:")
    print("  marpdeck --help")


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate Marp slide decks with AI text and images.")
    p.add_argument("--version", action="version", version=f"marpdeck {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate", help="Generate a deck for a topic")
    g.add_argument("--topic", required=True, help="Presentation topic")
    g.add_argument("--slides", type=int, default=5, help="Number of slides to generate")
    g.add_argument("--language", default="pt-BR", choices=sorted(LANGUAGES), help="Presentation language")
    g.add_argument("--image-style", default="realism", choices=sorted(IMAGE_STYLES), help="Image style preset")
    g.add_argument("--model", default="gpt-4o", help="Text model name")
    g.add_argument("--no-images", action="store_true", help="Skip image generation")
    g.add_argument("--max-workers", type=int, default=8, help="Concurrent image requests")
    g.add_argument(
        "--image-timeout",
        type=float,
        default=None,
        help="Deadline (s) for the image stage; also caps each image HTTP request",
    )
    g.add_argument("--retries", type=int, default=1, help="Attempts for the text request")
    g.add_argument("--seed", type=int, default=None, help="Seed for the random layout fallback")
    g.add_argument(
        "--root-dir",
        default=None,
        help="Root directory for all runs (default: $MARPDECK_ROOT_DIR or ~/marpdeck_runs)",
    )
    g.add_argument("--out-dir", default=None, help="Output directory (overrides --root-dir)")
    g.add_argument("--verbose", action="store_true", help="Verbose logging")

    for name, text in [("preview", "Render a deck to the HTML preview"), ("export", "Write the Marp export page")]:
        s = sub.add_parser(name, help=text)
        s.add_argument("deck", help="Path to a deck markdown file")
        s.add_argument("-o", "--output", default=None, help="Output HTML path")
        s.add_argument("--verbose", action="store_true", help="Verbose logging")

    return p.parse_args(argv)


def _print_event(event: ProgressEvent) -> None:
    if event.log_line:
        return
    logger.debug("[%3d%%] %s", round(event.progress * 100), event.step)


def _config_from_args(args: argparse.Namespace) -> RunConfig:
    root_dir = args.root_dir or os.environ.get("MARPDECK_ROOT_DIR", "~/marpdeck_runs")
    if args.out_dir:
        out_dir = Path(args.out_dir).expanduser().resolve()
    else:
        out_dir = Path(root_dir).expanduser().resolve() / DeckStore.slugify_filename(args.topic)
    return RunConfig(
        topic=args.topic.strip(),
        out_dir=out_dir,
        slide_count=args.slides,
        language=args.language,
        image_style=args.image_style,
        text_model=args.model,
        generate_images=not args.no_images,
        max_image_workers=max(1, args.max_workers),
        image_timeout=args.image_timeout,
        text_retries=max(1, args.retries),
        seed=args.seed,
        verbose=args.verbose,
    )


def run_generate(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    cfg.out_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(cfg.verbose, run_dir=cfg.out_dir)

    llm_cfg = LLMConfig(
        api_key=os.environ.get("OPENAI_API_KEY", ""),
        backend_url=os.environ.get("MARPDECK_BACKEND_URL", ""),
        backend_token=os.environ.get("MARPDECK_BACKEND_TOKEN", ""),
        image_timeout=cfg.image_timeout,
    )
    if not llm_cfg.backend_url and not llm_cfg.api_key:
        logger.error("Set OPENAI_API_KEY or MARPDECK_BACKEND_URL.")
        return 2

    progress = GenerationProgress()
    progress.subscribe(_print_event)
    pipeline = DeckPipeline(cfg, init_provider(llm_cfg), progress=progress)
    try:
        result = pipeline.run()
    except ExtractionError as exc:
        logger.error("%s", exc)
        logger.error("Cleaned response:\n%s", exc.cleaned)
        return 1
    except DeckError as exc:
        logger.error("%s", exc)
        return 1
    except Exception:
        logger.exception("Unhandled error in pipeline run")
        return 1

    if result.failed_images:
        logger.warning("Slides without images: %s", ", ".join(str(i + 1) for i in result.failed_images))
    print("\nOutput directory:", cfg.out_dir)
    for kind, path in result.paths.items():
        print(f"{kind}: {path}")
    return 0


def run_render(args: argparse.Namespace) -> int:
    setup_logging(args.verbose)
    deck_path = Path(args.deck).expanduser().resolve()
    if not deck_path.exists():
        logger.error("Deck not found: %s", deck_path)
        return 2
    markdown = deck_path.read_text(encoding="utf-8")
    if args.command == "preview":
        html = render_preview(markdown)
        default_name = deck_path.stem + ".preview.html"
    else:
        html = render_export_html(markdown)
        default_name = deck_path.stem + ".export.html"
    out_path = Path(args.output).expanduser().resolve() if args.output else deck_path.with_name(default_name)
    out_path.write_text(html, encoding="utf-8")
    logger.info("Saved %s: %s", args.command, out_path)
    return 0


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == "help":
        print_helper()
        return 0

    env_path = Path(__file__).parent / ".env"
    load_dotenv(env_path, override=False)
    args = parse_args(argv)

    if args.command == "generate":
        return run_generate(args)
    return run_render(args)


if __name__ == "__main__":
    raise SystemExit(main())
