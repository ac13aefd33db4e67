"""
wikigen command line

Usage:
    wikigen generate "Coffee" --count 3 --output coffee.json
    wikigen generate "Volcanoes" --provider perplexity --existing articles.json
    wikigen check
"""

import asyncio
import json
import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .auth.session import AuthenticationError, StaticSessionProvider, UserIdentity
from .config.settings import Settings, get_settings
from .config.startup_validation import run_startup_validation
from .models.article import Article
from .services.ai_service import create_ai_service
from .utils.logger import configure_logging


logger = logging.getLogger(__name__)


def load_existing_articles(path: Optional[str]) -> list[Article]:
    """Read previously generated articles from a JSON array file."""
    if not path:
        return []
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = [data]
    return [Article.model_validate(item) for item in data]


def build_session(settings: Settings) -> StaticSessionProvider:
    """Command-line runs act as the configured author."""
    if not (settings.author_name or settings.author_email):
        return StaticSessionProvider()
    return StaticSessionProvider(
        UserIdentity(
            uid=settings.author_email or settings.author_name,
            display_name=settings.author_name,
            email=settings.author_email,
        )
    )


async def run_generate(args: argparse.Namespace, settings: Settings) -> int:
    existing = load_existing_articles(args.existing)
    min_words = args.min_words or settings.default_min_word_count
    max_words = args.max_words or settings.default_max_word_count

    service = create_ai_service(settings, build_session(settings))
    try:
        if args.count == 1:
            article = await service.generate_article(args.topic, existing, min_words, max_words)
            articles = [article] if article else []
        else:
            report = await service.generate_batch(
                args.topic, args.count, existing, min_words, max_words
            )
            articles = report.articles
            if report.shortfall:
                print(
                    f"Generated {len(articles)}/{report.requested} articles "
                    f"in {report.attempts} attempts",
                    file=sys.stderr,
                )
    finally:
        await service.aclose()

    payload = [article.model_dump(mode="json") for article in articles]
    output = json.dumps(payload, indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Wrote {len(articles)} article(s) to {args.output}", file=sys.stderr)
    else:
        print(output)

    return 0 if articles else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wikigen",
        description="Generate encyclopedia-style articles with an AI provider"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate one or more articles")
    generate.add_argument("topic", help="Topic to write about")
    generate.add_argument("--count", type=int, default=1, help="Number of articles (default: 1)")
    generate.add_argument("--min-words", type=int, default=None, help="Minimum word count")
    generate.add_argument("--max-words", type=int, default=None, help="Maximum word count")
    generate.add_argument(
        "--provider",
        choices=["openai", "perplexity"],
        help="Override the configured AI provider"
    )
    generate.add_argument("--existing", help="JSON file of existing articles to check for duplicates")
    generate.add_argument("--output", help="Write generated articles to this JSON file")

    subparsers.add_parser("check", help="Validate configured credentials")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if getattr(args, "provider", None):
        settings = settings.model_copy(update={"ai_provider": args.provider})
    configure_logging(settings.log_level, settings.log_dir)

    if args.command == "check":
        validation = run_startup_validation(settings, print_summary=True)
        return 0 if validation.is_valid else 1

    try:
        return asyncio.run(run_generate(args, settings))
    except AuthenticationError as e:
        print(f"Error: {e}. Set AUTHOR_NAME or AUTHOR_EMAIL.", file=sys.stderr)
        return 2
    except (ValueError, ValidationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
