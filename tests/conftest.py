from __future__ import annotations

import os
import tempfile
from typing import Any, Callable, Iterable

import pytest

os.environ.setdefault("MARKETSCRAPER_LOG_DIR", tempfile.mkdtemp(prefix="marketscraper-logs-"))

from marketscraper.errors import PageLoadError, SelectorTimeoutError  # noqa: E402
from marketscraper.selectors import SelectorConfig, load_config_data  # noqa: E402

SITE_URL = "https://shop.example.com"

TEST_SELECTORS = {
    "category_menu": "nav.categories",
    "product_container": "div.grid",
    "product_card": "div.card",
    "product_title": "h2.title",
    "product_link": "a[href]",
    "product_image": "img",
    "price_container": ".price-box .price",
    "discounted_price_container": ".discount-box",
    "original_price": ".price",
    "discounted_price": ".discounted",
    "nutrition_tab": "button.tab",
    "nutrition_table": "div.nutrition table",
    "product_description_key": ".desc-key",
}


def make_config_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": "testshop",
        "url": SITE_URL,
        "selectors": dict(TEST_SELECTORS),
        "category_blacklist": ["kampanya"],
        "stop_category_at": "temizlik",
        "labels": {"ingredients": "Ingredients", "nutrition_tab": "Energy and Nutrients"},
        "delays": {"scroll_settle_ms": 0},
        "retries": {"navigation_attempts": 1},
    }
    data.update(overrides)
    return data


@pytest.fixture()
def site_config() -> SelectorConfig:
    return load_config_data(make_config_data())


Handler = Callable[..., Any]


class FakeSurface:
    """Scripted stand-in for a rendered page.

    ``evaluate`` maps a script constant to a value or to a callable receiving
    ``(current_url, *args)``. ``cards`` maps a page URL to the raw payload the
    card script would return there. Returning an exception instance from a
    handler raises it.
    """

    def __init__(
        self,
        *,
        evaluate: dict[str, Any] | None = None,
        cards: dict[str, list[Any]] | None = None,
        missing_selectors: Iterable[str] = (),
        failing_urls: Iterable[str] = (),
    ) -> None:
        self.evaluate_handlers = dict(evaluate or {})
        self.cards = dict(cards or {})
        self.missing_selectors = set(missing_selectors)
        self.failing_urls = set(failing_urls)
        self.current_url: str | None = None
        self.calls: list[tuple[str, Any]] = []

    def count(self, kind: str, target: Any = None) -> int:
        return sum(
            1 for call_kind, call_target in self.calls
            if call_kind == kind and (target is None or call_target == target)
        )

    async def navigate(
        self, url: str, *, wait_until: str = "domcontentloaded", timeout_ms: int = 60000
    ) -> None:
        self.calls.append(("navigate", url))
        if url in self.failing_urls:
            raise PageLoadError("Navigation failed: net::ERR_TIMED_OUT", url=url)
        self.current_url = url

    async def wait_for_selector(self, selector: str, *, timeout_ms: int) -> None:
        self.calls.append(("wait", selector))
        if selector in self.missing_selectors:
            raise SelectorTimeoutError(selector=selector, url=self.current_url)

    async def evaluate(self, script: str, *args: Any) -> Any:
        self.calls.append(("evaluate", script))
        handler = self.evaluate_handlers.get(script)
        result = handler(self.current_url, *args) if callable(handler) else handler
        if isinstance(result, Exception):
            raise result
        return result

    async def query_all_and_map(self, selector: str, script: str, *args: Any) -> list[Any]:
        self.calls.append(("query_all", selector))
        return list(self.cards.get(self.current_url or "", []))


def card(
    title: str | None,
    *,
    href: str | None = None,
    image: str | None = None,
    original: str | None = None,
    discounted: str | None = None,
    has_discount: bool = False,
) -> dict[str, Any]:
    return {
        "title": title,
        "href": href,
        "image": image,
        "hasDiscount": has_discount,
        "originalText": original,
        "discountedText": discounted,
    }


def sequence(values: Iterable[Any]) -> Handler:
    """Return a handler yielding *values* one call at a time."""

    iterator = iter(values)

    def _next(_url: str | None, *_args: Any) -> Any:
        return next(iterator)

    return _next
