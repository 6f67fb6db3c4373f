"""Centralised helpers for Playwright launch + stealth configuration."""

from __future__ import annotations

import os
import shlex
from functools import lru_cache
from typing import Any
from urllib.parse import urlparse

from playwright.async_api import Browser, Page, Playwright
from playwright_stealth import Stealth

from marketscraper.logging_config import get_logger

LOGGER = get_logger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}
DEFAULT_VIEWPORT = (1280, 1200)


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in _FALSE_VALUES


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def headless_enabled() -> bool:
    """Return True if Playwright should run in headless mode."""

    return _as_bool(os.getenv("MARKETSCRAPER_HEADLESS"), True)


def stealth_enabled() -> bool:
    """Return True when stealth evasion scripts should be applied."""

    return _as_bool(os.getenv("MARKETSCRAPER_STEALTH"), True)


def viewport() -> dict[str, int]:
    """Return the page viewport, overridable as ``WIDTHxHEIGHT``."""

    raw = os.getenv("MARKETSCRAPER_VIEWPORT")
    width, height = DEFAULT_VIEWPORT
    if raw:
        parts = raw.lower().split("x")
        if len(parts) == 2 and all(part.strip().isdigit() for part in parts):
            width, height = int(parts[0]), int(parts[1])
        else:
            LOGGER.warning("Ignoring malformed MARKETSCRAPER_VIEWPORT=%r", raw)
    return {"width": width, "height": height}


@lru_cache(maxsize=1)
def _stealth_instance():
    if not stealth_enabled():
        return None
    return Stealth()


def apply_stealth(playwright: Playwright) -> None:
    """Hook the provided Playwright object with stealth evasions when available."""

    instance = _stealth_instance()
    if instance is None:
        return
    try:
        instance.hook_playwright_context(playwright)
    except Exception as exc:
        LOGGER.warning("Stealth hook failed; continuing without evasions: %s", exc)


def _proxy_config() -> dict[str, str] | None:
    raw = os.getenv("MARKETSCRAPER_PROXY")
    if not raw:
        return None
    parsed = urlparse(raw)
    if not parsed.scheme:
        return {"server": f"http://{raw}"}
    return {"server": raw}


def slow_mo_ms() -> int | None:
    value = _env_int("MARKETSCRAPER_SLOW_MO_MS", 0)
    return value if value > 0 else None


def launch_kwargs() -> dict[str, Any]:
    """Return kwargs passed to chromium.launch."""

    args = [
        "--disable-blink-features=AutomationControlled",
        "--disable-dev-shm-usage",
        "--no-default-browser-check",
    ]
    extra_args = os.getenv("MARKETSCRAPER_CHROMIUM_ARGS")
    if extra_args:
        args.extend(shlex.split(extra_args))

    kwargs: dict[str, Any] = {
        "headless": headless_enabled(),
        "args": args,
    }

    channel = os.getenv("MARKETSCRAPER_BROWSER_CHANNEL")
    if channel:
        kwargs["channel"] = channel

    proxy = _proxy_config()
    if proxy:
        kwargs["proxy"] = proxy

    slow_mo = slow_mo_ms()
    if slow_mo:
        kwargs["slow_mo"] = slow_mo

    return kwargs


async def launch_browser(playwright: Playwright) -> tuple[Browser, Page]:
    """Launch Chromium according to env overrides and open the single work page."""

    browser = await playwright.chromium.launch(**launch_kwargs())
    context = await browser.new_context(viewport=viewport())
    page = await context.new_page()
    return browser, page


async def close_browser(browser: Browser | None) -> None:
    """Close the browser, logging rather than raising on failure."""

    if browser is None:
        return
    try:
        await browser.close()
    except Exception as exc:
        LOGGER.warning("Failed to close browser: %s", exc)


__all__ = [
    "apply_stealth",
    "close_browser",
    "headless_enabled",
    "launch_browser",
    "launch_kwargs",
    "stealth_enabled",
    "viewport",
]
