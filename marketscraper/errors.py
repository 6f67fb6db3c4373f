"""Custom exception types for marketscraper."""

from __future__ import annotations

from typing import Optional


class _ContextError(Exception):
    """Base class carrying optional crawl context for log-friendly messages."""

    default_message = "Scrape failed."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        url: Optional[str] = None,
        selector: Optional[str] = None,
        category: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        self.message = message or self.default_message
        self.url = url
        self.selector = selector
        self.category = category
        self.path = path
        super().__init__(self.message)

    def __str__(self) -> str:
        context_parts: list[str] = []
        if self.selector:
            context_parts.append(f"selector={self.selector}")
        if self.url:
            context_parts.append(f"url={self.url}")
        if self.category:
            context_parts.append(f"category={self.category}")
        if self.path:
            context_parts.append(f"path={self.path}")
        context = ", ".join(context_parts)
        return f"{self.message} ({context})" if context else self.message


class ConfigError(_ContextError):
    """Raised when a site configuration is missing or malformed."""

    default_message = "Invalid site configuration."


class SelectorTimeoutError(_ContextError):
    """Raised when a selector does not appear within its bounded wait."""

    default_message = "Selector did not appear in time."


class PageLoadError(_ContextError):
    """Raised when a page fails to load or render correctly."""

    default_message = "Failed to load page."


class CatalogWriteError(_ContextError):
    """Raised when a category catalog cannot be written to disk."""

    default_message = "Failed to write catalog file."


__all__ = [
    "CatalogWriteError",
    "ConfigError",
    "PageLoadError",
    "SelectorTimeoutError",
]
