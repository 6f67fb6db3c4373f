"""Detail page enrichment: ingredients and nutrition facts."""

from __future__ import annotations

import logging
from typing import Any

from marketscraper.extractors.dom_utils import clean_text
from marketscraper.extractors.schemas import NutritionEntry, ProductDetail
from marketscraper.logging_config import get_logger
from marketscraper.selectors import SelectorConfig
from marketscraper.surface import RenderSurface

LOGGER = get_logger(__name__)

INGREDIENTS_SCRIPT = """
([keySelector, label]) => {
  const key = Array.from(document.querySelectorAll(keySelector))
    .find((el) => el.textContent.trim() === label);
  const sibling = key ? key.nextElementSibling : null;
  return sibling ? sibling.textContent : null;
}
"""

CLICK_NUTRITION_TAB_SCRIPT = """
([tabSelector, label]) => {
  const tab = Array.from(document.querySelectorAll(tabSelector))
    .find((el) => el.textContent.includes(label));
  if (!tab) return false;
  tab.click();
  return true;
}
"""

NUTRITION_ROWS_SCRIPT = """
(tableSelector) => {
  const table = document.querySelector(tableSelector);
  if (!table) return [];
  return Array.from(table.querySelectorAll('tbody tr')).map((row) =>
    Array.from(row.querySelectorAll('td')).map((cell) => cell.textContent)
  );
}
"""


def rows_to_entries(rows: Any) -> list[NutritionEntry]:
    """Keep two-cell rows as name/value pairs, in table order."""

    entries: list[NutritionEntry] = []
    for row in rows or []:
        if not isinstance(row, (list, tuple)) or len(row) != 2:
            continue
        name, value = (str(cell or "").strip() for cell in row)
        entries.append(NutritionEntry(name=name, value=value))
    return entries


async def _read_ingredients(surface: RenderSurface, config: SelectorConfig) -> str | None:
    raw = await surface.evaluate(
        INGREDIENTS_SCRIPT,
        config.selectors.product_description_key,
        config.labels.ingredients,
    )
    return clean_text(raw)


async def _read_nutrition(surface: RenderSurface, config: SelectorConfig) -> list[NutritionEntry] | None:
    clicked = await surface.evaluate(
        CLICK_NUTRITION_TAB_SCRIPT,
        config.selectors.nutrition_tab,
        config.labels.nutrition_tab,
    )
    if not clicked:
        return None

    table = config.selectors.nutrition_table
    await surface.wait_for_selector(table, timeout_ms=config.timeouts.nutrition_ms)
    rows = await surface.evaluate(NUTRITION_ROWS_SCRIPT, table)
    return rows_to_entries(rows)


async def enrich_product(
    surface: RenderSurface,
    url: str,
    config: SelectorConfig,
    logger: logging.Logger | None = None,
) -> ProductDetail:
    """Navigate to *url* and read its optional ingredients and nutrition data.

    Navigation errors propagate so the caller can skip the product. The two
    lookups are independent: a failure in one is logged and leaves only that
    field ``None``.
    """

    log = logger or LOGGER
    await surface.navigate(
        url,
        wait_until="domcontentloaded",
        timeout_ms=config.timeouts.detail_navigation_ms,
    )

    ingredients: str | None = None
    try:
        ingredients = await _read_ingredients(surface, config)
    except Exception as exc:
        log.warning("Could not read ingredients for %s: %s", url, exc)

    nutrition: list[NutritionEntry] | None = None
    try:
        nutrition = await _read_nutrition(surface, config)
    except Exception as exc:
        log.warning("Could not read nutrition facts for %s: %s", url, exc)

    return ProductDetail(ingredients=ingredients, nutrition_facts=nutrition)


__all__ = [
    "CLICK_NUTRITION_TAB_SCRIPT",
    "INGREDIENTS_SCRIPT",
    "NUTRITION_ROWS_SCRIPT",
    "enrich_product",
    "rows_to_entries",
]
