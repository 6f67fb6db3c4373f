"""Utility helpers for normalising scraped text values."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

_PRICE_JUNK = re.compile(r"[^\d.,]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_price(text: str | None) -> float | None:
    """Parse a Turkish-locale price string into a float.

    ``.`` is treated as the thousands separator and ``,`` as the decimal
    separator, so ``"1.234,56 ₺"`` becomes ``1234.56``. The periods must be
    removed before the comma is rewritten or ``"12,50"`` would turn into 1250.
    Returns ``None`` when nothing numeric survives.
    """

    if not text:
        return None

    cleaned = _PRICE_JUNK.sub("", text).replace(".", "").replace(",", ".", 1)
    # Stray commas after the decimal one end the number.
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    return float(match.group(0))


def derive_brand(name: str | None) -> str | None:
    """Return the uppercased first token of *name*."""

    if not name:
        return None
    tokens = name.split()
    if not tokens:
        return None
    return tokens[0].upper()


def absolute_url(base_url: str, href: str | None) -> str | None:
    """Resolve *href* against *base_url*, passing ``None`` through."""

    if not href:
        return None
    trimmed = href.strip()
    if not trimmed:
        return None
    if trimmed.startswith("//"):
        return f"https:{trimmed}"
    return urljoin(base_url, trimmed)


def category_slug(url: str) -> str:
    """Return the output filename stem for a category URL.

    The slug is the last path segment with the query string and fragment
    dropped. A trailing slash is ignored.
    """

    path = urlparse(url).path.rstrip("/")
    slug = path.rsplit("/", 1)[-1]
    if not slug:
        raise ValueError(f"Cannot derive a category slug from {url!r}")
    return slug


__all__ = ["absolute_url", "category_slug", "derive_brand", "parse_price"]
