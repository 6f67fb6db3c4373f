"""Category orchestration: navigate, paginate, extract, enrich, persist."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from marketscraper.catalog.discover import discover_categories
from marketscraper.errors import CatalogWriteError, PageLoadError
from marketscraper.extractors.detail import enrich_product
from marketscraper.extractors.dom_utils import settle
from marketscraper.extractors.listing import extract_products
from marketscraper.extractors.pagination import scroll_until_stable
from marketscraper.extractors.schemas import ProductRecord, ProductSummary
from marketscraper.logging_config import get_logger
from marketscraper.normalizers import category_slug
from marketscraper.selectors import SelectorConfig
from marketscraper.storage.writer import write_category
from marketscraper.surface import RenderSurface

LOGGER = get_logger(__name__)
PROGRESS_BAR_WIDTH = 20


class CategoryState(str, Enum):
    LOADING = "loading"
    PAGINATING = "paginating"
    EXTRACTING = "extracting"
    ENRICHING = "enriching"
    PERSISTED = "persisted"
    ABORTED = "aborted"


@dataclass
class RunContext:
    """Per-run resources handed to every stage.

    The context owns the single render surface and the run logger. Nothing
    else is shared between categories.
    """

    config: SelectorConfig
    surface: RenderSurface
    output_dir: Path
    fail_fast: bool = False
    logger: logging.Logger = field(default_factory=lambda: LOGGER)


@dataclass
class CategoryOutcome:
    url: str
    slug: str | None
    state: CategoryState
    records: int = 0
    skipped: int = 0
    path: Path | None = None
    error: str | None = None
    # Stage the category was in when it aborted.
    failed_at: CategoryState | None = None

    @property
    def persisted(self) -> bool:
        return self.state is CategoryState.PERSISTED


@dataclass
class RunSummary:
    categories: list[str] = field(default_factory=list)
    outcomes: list[CategoryOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(outcome.persisted for outcome in self.outcomes)

    @property
    def aborted(self) -> list[CategoryOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.persisted]


def progress_line(index: int, total: int) -> str:
    """Render ``index/total [bar] pct%`` for detail page progress."""

    percent = round(index / total * 100) if total else 100
    filled = percent * PROGRESS_BAR_WIDTH // 100
    bar = "█" * filled + " " * (PROGRESS_BAR_WIDTH - filled)
    return f"{index}/{total} [{bar}] {percent}%"


async def _load_category(ctx: RunContext, url: str) -> None:
    @retry(
        stop=stop_after_attempt(ctx.config.retries.navigation_attempts),
        wait=wait_random_exponential(multiplier=0.5, max=5),
        retry=retry_if_exception_type(PageLoadError),
        reraise=True,
    )
    async def _goto() -> None:
        await ctx.surface.navigate(
            url,
            wait_until="domcontentloaded",
            timeout_ms=ctx.config.timeouts.navigation_ms,
        )

    await _goto()


async def _enrich_all(ctx: RunContext, summaries: list[ProductSummary]) -> tuple[list[ProductRecord], int]:
    records: list[ProductRecord] = []
    skipped = 0
    total = len(summaries)
    for index, summary in enumerate(summaries, start=1):
        if not summary.url:
            ctx.logger.warning("Product '%s' has no detail URL; skipping enrichment", summary.name)
            records.append(ProductRecord.merge(summary))
            skipped += 1
            continue

        ctx.logger.info("  Inspecting product detail page: %s", progress_line(index, total))
        try:
            detail = await enrich_product(ctx.surface, summary.url, ctx.config, ctx.logger)
        except Exception as exc:
            ctx.logger.warning("Detail page failed for %s: %s", summary.url, exc)
            records.append(ProductRecord.merge(summary))
            skipped += 1
            continue
        records.append(ProductRecord.merge(summary, detail))
    return records, skipped


def _advance(ctx: RunContext, outcome: CategoryOutcome, state: CategoryState) -> None:
    outcome.state = state
    ctx.logger.debug("category=%s state=%s", outcome.slug, state.value)


async def scrape_category(
    ctx: RunContext,
    url: str,
    outcome: CategoryOutcome | None = None,
) -> CategoryOutcome:
    """Run one category end to end and persist its catalog file.

    *outcome* is advanced through each :class:`CategoryState` as the category
    progresses, so a caller holding it knows which stage an exception came
    from. Loading and pagination failures propagate. Per-product detail
    failures are logged and the product is kept without detail fields. A
    write failure raises :class:`CatalogWriteError`.
    """

    if outcome is None:
        outcome = CategoryOutcome(url=url, slug=None, state=CategoryState.LOADING)
    slug = category_slug(url)
    outcome.slug = slug
    log = ctx.logger
    log.info("--- Fetching products for category %s ---", slug)

    _advance(ctx, outcome, CategoryState.LOADING)
    log.info("Loading category page: %s", url)
    await _load_category(ctx, url)

    _advance(ctx, outcome, CategoryState.PAGINATING)
    await scroll_until_stable(ctx.surface, ctx.config, ctx.logger)

    _advance(ctx, outcome, CategoryState.EXTRACTING)
    try:
        summaries = await extract_products(ctx.surface, ctx.config, ctx.logger)
    except Exception as exc:
        log.error("Product extraction failed for %s: %s", slug, exc)
        summaries = []

    _advance(ctx, outcome, CategoryState.ENRICHING)
    records, skipped = await _enrich_all(ctx, summaries)
    outcome.records = len(records)
    outcome.skipped = skipped

    outcome.path = write_category(records, ctx.output_dir, slug)
    _advance(ctx, outcome, CategoryState.PERSISTED)
    log.info("Saved %s. Total products: %d", outcome.path, len(records))
    return outcome


def select_categories(
    categories: Iterable[str],
    *,
    pattern: re.Pattern[str] | None = None,
    limit: int | None = None,
) -> list[str]:
    """Apply the optional CLI regex filter and limit to discovered categories."""

    selected = [url for url in categories if pattern is None or pattern.search(url)]
    if limit is not None and limit >= 0:
        selected = selected[:limit]
    return selected


async def run_site(
    ctx: RunContext,
    *,
    pattern: re.Pattern[str] | None = None,
    limit: int | None = None,
) -> RunSummary:
    """Discover the site's categories and scrape them one after another.

    Discovery and write failures always propagate. Any other category failure
    marks that category aborted and the run moves on, unless
    ``ctx.fail_fast`` is set.
    """

    log = ctx.logger
    discovered = await discover_categories(ctx.surface, ctx.config, ctx.logger)
    categories = select_categories(discovered, pattern=pattern, limit=limit)
    summary = RunSummary(categories=categories)

    log.info("--- Processing %d categories ---", len(categories))
    for position, url in enumerate(categories):
        if position and ctx.config.delays.between_categories_ms:
            await settle(ctx.config.delays.between_categories_ms)
        outcome = CategoryOutcome(url=url, slug=None, state=CategoryState.LOADING)
        try:
            await scrape_category(ctx, url, outcome)
        except CatalogWriteError:
            raise
        except Exception as exc:
            if ctx.fail_fast:
                raise
            log.exception("Category aborted while %s: %s", outcome.state.value, url)
            outcome.failed_at = outcome.state
            outcome.state = CategoryState.ABORTED
            outcome.error = str(exc)
        summary.outcomes.append(outcome)

    if summary.ok:
        log.info("All categories processed successfully.")
    else:
        log.error(
            "%d of %d categories aborted: %s",
            len(summary.aborted),
            len(summary.outcomes),
            ", ".join(outcome.slug or outcome.url for outcome in summary.aborted),
        )
    return summary


__all__ = [
    "CategoryOutcome",
    "CategoryState",
    "RunContext",
    "RunSummary",
    "progress_line",
    "run_site",
    "scrape_category",
    "select_categories",
]
