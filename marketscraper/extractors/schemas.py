"""Data validation schemas for extracted catalog records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from marketscraper.normalizers import derive_brand


class NutritionEntry(BaseModel):
    """One row of a detail page's nutrition table."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class ProductDetail(BaseModel):
    """Optional data read from a product's detail page."""

    ingredients: str | None = None
    nutrition_facts: list[NutritionEntry] | None = Field(default=None, alias="nutritionFacts")

    model_config = ConfigDict(populate_by_name=True)


class ProductSummary(BaseModel):
    """Product data read from a category page card."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    brand: str | None = None
    price: float | None = None
    discounted_price: float | None = Field(default=None, alias="discountedPrice")
    image_url: str | None = Field(default=None, alias="imageUrl")
    url: str | None = None

    @classmethod
    def from_card(
        cls,
        *,
        name: str | None,
        price: float | None,
        discounted_price: float | None = None,
        image_url: str | None = None,
        url: str | None = None,
    ) -> "ProductSummary":
        return cls(
            name=name,
            brand=derive_brand(name),
            price=price,
            discounted_price=discounted_price,
            image_url=image_url,
            url=url,
        )

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and self.price is not None


class ProductRecord(ProductSummary):
    """A summary merged with its detail page data, ready for persistence."""

    ingredients: str | None = None
    nutrition_facts: list[NutritionEntry] | None = Field(default=None, alias="nutritionFacts")

    @classmethod
    def merge(cls, summary: ProductSummary, detail: ProductDetail | None = None) -> "ProductRecord":
        detail = detail or ProductDetail()
        return cls(
            **summary.model_dump(),
            ingredients=detail.ingredients,
            nutrition_facts=detail.nutrition_facts,
        )

    def to_catalog_dict(self) -> dict[str, Any]:
        """Serialise with camelCase keys and without the crawl-time ``url``."""

        return self.model_dump(by_alias=True, exclude={"url"})


__all__ = ["NutritionEntry", "ProductDetail", "ProductRecord", "ProductSummary"]
