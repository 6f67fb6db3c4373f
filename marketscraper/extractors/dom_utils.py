"""Helper utilities for safely interacting with rendered catalog pages."""

from __future__ import annotations

import asyncio
from typing import Any

from marketscraper.surface import RenderSurface

COUNT_CARDS_SCRIPT = """
([containerSelector, cardSelector]) => {
  const container = document.querySelector(containerSelector);
  return container ? container.querySelectorAll(cardSelector).length : 0;
}
"""

SCROLL_TO_BOTTOM_SCRIPT = """
() => {
  window.scrollTo(0, document.body.scrollHeight);
  return document.body.scrollHeight;
}
"""


async def settle(delay_ms: int) -> None:
    """Pause for the fixed settling delay after a page interaction."""

    await asyncio.sleep(max(delay_ms, 0) / 1000)


async def count_cards(surface: RenderSurface, container_selector: str, card_selector: str) -> int:
    """Return the number of cards currently rendered inside the container."""

    value: Any = await surface.evaluate(COUNT_CARDS_SCRIPT, container_selector, card_selector)
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


async def scroll_to_bottom(surface: RenderSurface) -> None:
    await surface.evaluate(SCROLL_TO_BOTTOM_SCRIPT)


def clean_text(value: Any) -> str | None:
    """Return stripped text, or ``None`` for missing or blank values."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = ["clean_text", "count_cards", "scroll_to_bottom", "settle"]
