"""CLI entry point: python -m articleparser URL [options]"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from articleparser import settings
from articleparser.errors import ArticleParserError
from articleparser.items import ParsedContent
from articleparser.query import extract_from_html, extract_from_url
from articleparser.settings import ParseOptions

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="articleparser",
        description=(
            "Extract a normalized article record from a web page.\n"
            "Canonical URL, title, description, sanitized content and reading time."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("target", nargs="?", default=None, metavar="URL",
                        help="Article URL to fetch and extract")
    parser.add_argument("--html-file", default=None, metavar="PATH",
                        help="Extract from a saved HTML file instead of fetching")
    parser.add_argument("--url", default="", metavar="URL",
                        help="Source URL of --html-file (used for link resolution)")
    parser.add_argument("--words-per-minute", type=int, default=None, metavar="N",
                        help="Reading speed for the ttr estimate (default: 300)")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Print the record as JSON instead of a summary panel")
    return parser


def _build_options(args: argparse.Namespace) -> ParseOptions:
    options = ParseOptions.from_env()
    if args.words_per_minute is None:
        return options
    return ParseOptions(
        words_per_minute=args.words_per_minute,
        desc_truncate_len=options.desc_truncate_len,
        desc_len_threshold=options.desc_len_threshold,
        content_len_threshold=options.content_len_threshold,
    )


def _print_article(article: ParsedContent, console: Console) -> None:
    tbl = Table(box=box.SIMPLE, show_header=False, pad_edge=False)
    tbl.add_column("Field", style="bold", no_wrap=True)
    tbl.add_column("Value", overflow="fold")

    tbl.add_row("URL", f"[green]{article.url}[/green]")
    tbl.add_row("Source", article.source or "-")
    tbl.add_row("Author", article.author or "-")
    tbl.add_row("Published", article.published or "-")
    tbl.add_row("Type", article.meta_type or "-")
    tbl.add_row("Image", article.image or "-")
    tbl.add_row("Favicon", article.favicon or "-")
    tbl.add_row("Reading time", f"{article.ttr} s")
    tbl.add_row("Candidates", "\n".join(article.links) or "-")
    tbl.add_row("Description", article.description or "-")

    console.print(
        Panel.fit(
            tbl,
            border_style="cyan",
            title=f"[bold cyan]{article.title}[/bold cyan]",
        ),
    )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.target and not args.html_file:
        parser.error("either URL or --html-file is required")

    logging.basicConfig(level=args.log_level, format=settings.LOG_FORMAT)

    try:
        options = _build_options(args)
        logger.debug("Parse options: %s", options)
        if args.html_file:
            html = Path(args.html_file).read_text(encoding="utf-8", errors="replace")
            article = extract_from_html(html, args.url or args.target or "", options)
        else:
            article = extract_from_url(args.target, options)
    except ArticleParserError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"ERROR: Could not read {args.html_file}: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(article.model_dump(), ensure_ascii=False, indent=2))
    else:
        _print_article(article, Console())
    return 0


if __name__ == "__main__":
    sys.exit(main())
