"""Infinite-scroll driver for category listing pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from marketscraper.extractors.dom_utils import count_cards, scroll_to_bottom, settle
from marketscraper.logging_config import get_logger
from marketscraper.selectors import SelectorConfig
from marketscraper.surface import RenderSurface

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class PaginationResult:
    final_count: int
    scroll_cycles: int


async def scroll_until_stable(
    surface: RenderSurface,
    config: SelectorConfig,
    logger: logging.Logger | None = None,
) -> PaginationResult:
    """Scroll the current category page until the card count stops growing.

    The surface must already be on a category page. Each cycle scrolls to the
    bottom, waits the settling delay and recounts; the loop ends on the first
    recount that is not strictly greater than the previous one. There is no
    page cap, so a list that grows forever keeps this loop running.

    Raises :class:`~marketscraper.errors.SelectorTimeoutError` when the
    product container never appears.
    """

    log = logger or LOGGER
    container = config.selectors.product_container
    card = config.selectors.product_card

    log.info("Waiting for product list container...")
    try:
        await surface.wait_for_selector(container, timeout_ms=config.timeouts.container_ms)
    except Exception as exc:
        log.error("Product list container not found: %s", exc)
        raise
    log.info("Product list container found, scrolling")

    previous = await count_cards(surface, container, card)
    cycles = 0
    while True:
        await scroll_to_bottom(surface)
        await settle(config.delays.scroll_settle_ms)
        cycles += 1
        current = await count_cards(surface, container, card)
        if current <= previous:
            log.info("Reached the end of the list. Total: %d products", current)
            return PaginationResult(final_count=current, scroll_cycles=cycles)
        log.debug("Loaded more products. Total: %d", current)
        previous = current


__all__ = ["PaginationResult", "scroll_until_stable"]
