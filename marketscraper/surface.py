"""Narrow page protocol the pipeline drives, plus the Playwright adapter.

Extraction code never touches Playwright directly. It navigates, waits for
selectors and evaluates scripts through :class:`RenderSurface`, which keeps the
browser an external collaborator and lets tests swap in a scripted fake.
"""

from __future__ import annotations

from typing import Any, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from marketscraper.errors import PageLoadError, SelectorTimeoutError


class RenderSurface(Protocol):
    """A navigable, scriptable page."""

    async def navigate(
        self, url: str, *, wait_until: str = "domcontentloaded", timeout_ms: int = 60000
    ) -> None: ...

    async def wait_for_selector(self, selector: str, *, timeout_ms: int) -> None: ...

    async def evaluate(self, script: str, *args: Any) -> Any: ...

    async def query_all_and_map(self, selector: str, script: str, *args: Any) -> list[Any]: ...


def _pack(args: tuple[Any, ...]) -> Any:
    # Playwright passes a single argument to page functions.
    if not args:
        return None
    if len(args) == 1:
        return args[0]
    return list(args)


class PlaywrightSurface:
    """:class:`RenderSurface` backed by an async Playwright ``Page``.

    Scripts are written as ``(arg) => ...`` where ``arg`` is the lone extra
    argument, or an array of them when more than one is passed.
    """

    def __init__(self, page: Page) -> None:
        self.page = page

    async def navigate(
        self, url: str, *, wait_until: str = "domcontentloaded", timeout_ms: int = 60000
    ) -> None:
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightError as exc:
            first_line = next(iter(str(exc).splitlines()), "")
            raise PageLoadError(f"Navigation failed: {first_line}", url=url) from exc

    async def wait_for_selector(self, selector: str, *, timeout_ms: int) -> None:
        try:
            await self.page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise SelectorTimeoutError(
                f"Selector did not appear within {timeout_ms} ms",
                selector=selector,
                url=self.page.url,
            ) from exc

    async def evaluate(self, script: str, *args: Any) -> Any:
        return await self.page.evaluate(script, _pack(args))

    async def query_all_and_map(self, selector: str, script: str, *args: Any) -> list[Any]:
        return await self.page.eval_on_selector_all(selector, script, _pack(args))


__all__ = ["PlaywrightSurface", "RenderSurface"]
