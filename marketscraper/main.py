"""Command-line interface entry point for marketscraper."""

from __future__ import annotations

import argparse
import asyncio
import re
import sys
from pathlib import Path
from typing import Iterable

from dotenv import find_dotenv, load_dotenv
from playwright.async_api import async_playwright

from marketscraper.catalog.discover import discover_categories
from marketscraper.errors import CatalogWriteError, ConfigError, PageLoadError, SelectorTimeoutError
from marketscraper.logging_config import configure_logging, get_logger, shutdown_logging
from marketscraper.playwright_env import apply_stealth, close_browser, launch_browser
from marketscraper.runner import RunContext, RunSummary, run_site
from marketscraper.selectors import SelectorConfig, available_sites, load_config, load_site
from marketscraper.surface import PlaywrightSurface

LOGGER = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the scraper."""

    parser = argparse.ArgumentParser(
        description="Crawl a grocery site's categories and write one JSON catalog per category."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--site",
        type=str,
        help="Name of a bundled site configuration (see --list-sites).",
    )
    source.add_argument(
        "--config",
        type=Path,
        help="Path to a site configuration YAML file.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for category JSON files (default: data/<site>).",
    )
    parser.add_argument(
        "--categories",
        dest="categories_filter",
        type=str,
        help="Regex applied to discovered category URLs (case-insensitive).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Only process the first N discovered categories.",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort the whole run on the first category failure.",
    )
    parser.add_argument(
        "--discover-only",
        action="store_true",
        help="Print the discovered category URLs and exit.",
    )
    parser.add_argument(
        "--list-sites",
        action="store_true",
        help="List bundled site configurations and exit.",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        help="Directory for the rotating run log (default: $MARKETSCRAPER_LOG_DIR or logs/).",
    )

    args = parser.parse_args(list(argv) if argv is not None else None)

    if not args.list_sites and not args.site and not args.config:
        parser.error("one of --site or --config is required")

    if args.limit is not None and args.limit <= 0:
        parser.error("--limit must be a positive integer")

    pattern_text = (args.categories_filter or "").strip()
    if pattern_text:
        try:
            args.categories_pattern = re.compile(pattern_text, re.IGNORECASE)
        except re.error as exc:
            parser.error(f"Invalid --categories pattern: {exc}")
    else:
        args.categories_pattern = None

    return args


def _load_site_config(args: argparse.Namespace) -> SelectorConfig:
    if args.config is not None:
        return load_config(args.config)
    return load_site(args.site)


def _resolve_output_dir(args: argparse.Namespace, config: SelectorConfig) -> Path:
    if args.output_dir is not None:
        return args.output_dir
    return Path("data") / config.name


async def _run(args: argparse.Namespace, config: SelectorConfig) -> RunSummary | None:
    output_dir = _resolve_output_dir(args, config)
    if not args.discover_only:
        if not output_dir.exists():
            LOGGER.info("Creating output directory %s", output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    async with async_playwright() as playwright:
        apply_stealth(playwright)
        LOGGER.info("Launching browser...")
        browser, page = await launch_browser(playwright)
        try:
            surface = PlaywrightSurface(page)
            if args.discover_only:
                for url in await discover_categories(surface, config):
                    print(url)
                return None

            ctx = RunContext(
                config=config,
                surface=surface,
                output_dir=output_dir,
                fail_fast=args.fail_fast,
            )
            return await run_site(ctx, pattern=args.categories_pattern, limit=args.limit)
        finally:
            await close_browser(browser)


def run(argv: Iterable[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""

    args = parse_args(argv)
    if args.list_sites:
        for name in available_sites():
            print(name)
        return EXIT_OK

    load_dotenv(find_dotenv(usecwd=True))
    configure_logging(args.log_dir)

    try:
        config = _load_site_config(args)
        LOGGER.info("Loaded site configuration '%s' (%s)", config.name, config.url)
        summary = asyncio.run(_run(args, config))
    except ConfigError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return EXIT_FAILURE
    except (PageLoadError, SelectorTimeoutError, CatalogWriteError) as exc:
        LOGGER.exception("Run aborted: %s", exc)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception:
        LOGGER.exception("Run failed")
        return EXIT_FAILURE
    finally:
        shutdown_logging()

    if summary is None or summary.ok:
        return EXIT_OK
    return EXIT_FAILURE


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
