"""Product card extraction for fully paginated category pages."""

from __future__ import annotations

import logging
from typing import Any

from marketscraper.errors import SelectorTimeoutError
from marketscraper.extractors.dom_utils import clean_text
from marketscraper.extractors.schemas import ProductSummary
from marketscraper.logging_config import get_logger
from marketscraper.normalizers import absolute_url, parse_price
from marketscraper.selectors import SelectorConfig
from marketscraper.surface import RenderSurface

LOGGER = get_logger(__name__)

# Runs once over every card and returns raw text only; parsing stays in Python.
CARD_TEXT_SCRIPT = """
(cards, s) => {
  const text = (root, selector) => {
    const el = root.querySelector(selector);
    return el ? el.textContent : null;
  };
  const image = (card) => {
    const img = card.querySelector(s.productImage);
    if (!img) return null;
    return img.currentSrc || img.src || img.getAttribute('data-src') || null;
  };
  return cards.map((card) => {
    const link = card.querySelector(s.productLink);
    const discountBox = card.querySelector(s.discountedPriceContainer);
    let originalText = null;
    let discountedText = null;
    if (discountBox) {
      originalText = text(discountBox, s.originalPrice);
      discountedText = text(discountBox, s.discountedPrice);
    } else {
      originalText = text(card, s.priceContainer) || text(card, s.originalPrice);
    }
    return {
      title: text(card, s.productTitle),
      href: link ? link.getAttribute('href') : null,
      image: image(card),
      hasDiscount: Boolean(discountBox),
      originalText,
      discountedText,
    };
  });
}
"""


def card_to_summary(raw: dict[str, Any], base_url: str) -> ProductSummary:
    """Turn one card's raw text payload into a :class:`ProductSummary`."""

    name = clean_text(raw.get("title"))
    price = parse_price(raw.get("originalText"))
    discounted = parse_price(raw.get("discountedText")) if raw.get("hasDiscount") else None
    return ProductSummary.from_card(
        name=name,
        price=price,
        discounted_price=discounted,
        image_url=absolute_url(base_url, raw.get("image")),
        url=absolute_url(base_url, raw.get("href")),
    )


async def extract_products(
    surface: RenderSurface,
    config: SelectorConfig,
    logger: logging.Logger | None = None,
) -> list[ProductSummary]:
    """Read every rendered card on the page into valid product summaries.

    A card selector that never matches yields an empty list. Cards without a
    name or a parseable price are dropped.
    """

    log = logger or LOGGER
    card_selector = config.selectors.product_card
    try:
        await surface.wait_for_selector(card_selector, timeout_ms=config.timeouts.card_ms)
    except SelectorTimeoutError:
        log.warning("Product card selector not found: %s", card_selector)
        return []

    raw_cards = await surface.query_all_and_map(
        card_selector,
        CARD_TEXT_SCRIPT,
        config.selectors.as_script_arg(),
    )

    summaries: list[ProductSummary] = []
    dropped = 0
    for raw in raw_cards or []:
        if not isinstance(raw, dict):
            dropped += 1
            continue
        summary = card_to_summary(raw, config.url)
        if not summary.is_valid:
            dropped += 1
            continue
        summaries.append(summary)

    if dropped:
        log.info("Dropped %d cards without a name or price", dropped)
    return summaries


__all__ = ["CARD_TEXT_SCRIPT", "card_to_summary", "extract_products"]
