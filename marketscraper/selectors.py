"""Per-site selector configuration for discovery and scraping flows.

Each target site ships a YAML file under ``marketscraper/sites``. The file
maps logical roles (menu, card, price nodes, ...) to CSS selectors and carries
the labels, timeouts and category filters the pipeline needs. The loaded
:class:`SelectorConfig` is frozen and shared read-only by every component for
the whole run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from marketscraper.errors import ConfigError

SITES_DIR = Path(__file__).resolve().parent / "sites"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SiteSelectors(_Frozen):
    """CSS selectors keyed by the role they play in the pipeline."""

    category_menu: str
    category_link: str = "a[href]"
    product_container: str
    product_card: str
    product_title: str
    product_link: str
    product_image: str
    price_container: str
    discounted_price_container: str
    original_price: str
    discounted_price: str
    nutrition_tab: str
    nutrition_table: str
    product_description_key: str

    @field_validator("*")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("selector must not be blank")
        return trimmed

    def as_script_arg(self) -> dict[str, str]:
        """Return the camelCase mapping handed to in-page scripts."""

        return {
            "productTitle": self.product_title,
            "productLink": self.product_link,
            "productImage": self.product_image,
            "priceContainer": self.price_container,
            "discountedPriceContainer": self.discounted_price_container,
            "originalPrice": self.original_price,
            "discountedPrice": self.discounted_price,
        }


class Labels(_Frozen):
    """Visible texts used to locate optional detail-page sections."""

    ingredients: str = "İçindekiler"
    nutrition_tab: str = "Enerji ve Besin Öğeleri"


class Timeouts(_Frozen):
    navigation_ms: int = Field(default=60000, gt=0)
    detail_navigation_ms: int = Field(default=30000, gt=0)
    menu_ms: int = Field(default=15000, gt=0)
    container_ms: int = Field(default=10000, gt=0)
    card_ms: int = Field(default=15000, gt=0)
    nutrition_ms: int = Field(default=10000, gt=0)


class Delays(_Frozen):
    scroll_settle_ms: int = Field(default=2000, ge=0)
    between_categories_ms: int = Field(default=0, ge=0)


class Retries(_Frozen):
    navigation_attempts: int = Field(default=2, ge=1)


class SelectorConfig(_Frozen):
    """Everything the pipeline needs to know about one target site."""

    name: str
    url: str
    selectors: SiteSelectors
    category_blacklist: tuple[str, ...] = ()
    stop_category_at: str | None = None
    labels: Labels = Labels()
    timeouts: Timeouts = Timeouts()
    delays: Delays = Delays()
    retries: Retries = Retries()

    @field_validator("url")
    @classmethod
    def _require_http(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed.startswith(("http://", "https://")):
            raise ValueError("url must be an absolute http(s) URL")
        return trimmed

    @field_validator("category_blacklist", mode="before")
    @classmethod
    def _clean_blacklist(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        return tuple(str(item) for item in value if str(item).strip())

    @field_validator("stop_category_at", mode="before")
    @classmethod
    def _blank_marker_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def available_sites() -> list[str]:
    """Return the names of bundled site configurations."""

    if not SITES_DIR.is_dir():
        return []
    return sorted(path.stem for path in SITES_DIR.glob("*.yml"))


def load_config_data(data: Any, *, source: str = "<memory>") -> SelectorConfig:
    """Validate an already-parsed mapping into a :class:`SelectorConfig`."""

    if not isinstance(data, dict):
        raise ConfigError("Site configuration must be a mapping", path=source)
    try:
        return SelectorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Site configuration is invalid: {exc}", path=source) from exc


def load_config(path: str | Path) -> SelectorConfig:
    """Load and validate a site configuration YAML file."""

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError("Site configuration file not found", path=str(config_path))
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Site configuration is not valid YAML: {exc}", path=str(config_path)) from exc
    return load_config_data(data, source=str(config_path))


def load_site(name: str) -> SelectorConfig:
    """Load one of the bundled site configurations by name."""

    path = SITES_DIR / f"{name}.yml"
    if not path.exists():
        known = ", ".join(available_sites()) or "none"
        raise ConfigError(f"Unknown site '{name}' (available: {known})")
    return load_config(path)


__all__ = [
    "Delays",
    "Labels",
    "Retries",
    "SelectorConfig",
    "SiteSelectors",
    "Timeouts",
    "available_sites",
    "load_config",
    "load_config_data",
    "load_site",
]
