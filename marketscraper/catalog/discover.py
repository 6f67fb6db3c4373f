"""Category discovery from a site's navigation menu."""

from __future__ import annotations

import logging
from typing import Iterable

from marketscraper.logging_config import get_logger
from marketscraper.normalizers import absolute_url
from marketscraper.selectors import SelectorConfig
from marketscraper.surface import RenderSurface

LOGGER = get_logger(__name__)

MENU_LINKS_SCRIPT = """
([menuSelector, linkSelector]) => {
  const menu = document.querySelector(menuSelector);
  if (!menu) return [];
  return Array.from(menu.querySelectorAll(linkSelector))
    .map((a) => a.href || a.getAttribute('href'));
}
"""


def filter_category_links(
    links: Iterable[str],
    blacklist: Iterable[str] = (),
    stop_marker: str | None = None,
) -> list[str]:
    """Apply blacklist, stop-marker truncation and order-preserving dedupe.

    The stop marker link itself is excluded along with everything after it.
    """

    banned = [word for word in blacklist if word]
    kept = [link for link in links if not any(word in link for word in banned)]

    if stop_marker:
        for index, link in enumerate(kept):
            if stop_marker in link:
                kept = kept[:index]
                break

    return list(dict.fromkeys(kept))


async def discover_categories(
    surface: RenderSurface,
    config: SelectorConfig,
    logger: logging.Logger | None = None,
) -> list[str]:
    """Return the ordered, deduplicated category URLs to crawl.

    Raises :class:`~marketscraper.errors.SelectorTimeoutError` when the menu
    never renders and :class:`~marketscraper.errors.PageLoadError` when the
    site root cannot be loaded.
    """

    log = logger or LOGGER
    log.info("Collecting category links from %s", config.url)
    await surface.navigate(
        config.url,
        wait_until="domcontentloaded",
        timeout_ms=config.timeouts.navigation_ms,
    )
    await surface.wait_for_selector(
        config.selectors.category_menu,
        timeout_ms=config.timeouts.menu_ms,
    )

    raw_links = await surface.evaluate(
        MENU_LINKS_SCRIPT,
        config.selectors.category_menu,
        config.selectors.category_link,
    )
    links = [
        resolved
        for resolved in (absolute_url(config.url, href) for href in raw_links or [])
        if resolved
    ]

    categories = filter_category_links(
        links,
        config.category_blacklist,
        config.stop_category_at,
    )
    log.info("Collected %d category links", len(categories))
    for link in categories:
        log.info("  %s", link)
    return categories


__all__ = ["MENU_LINKS_SCRIPT", "discover_categories", "filter_category_links"]
