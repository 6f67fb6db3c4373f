"""In-page scripts run against small HTML documents in a real Chromium page."""

from __future__ import annotations

import asyncio

import pytest

async_api = pytest.importorskip("playwright.async_api")

from marketscraper.catalog.discover import MENU_LINKS_SCRIPT  # noqa: E402
from marketscraper.extractors.detail import (  # noqa: E402
    CLICK_NUTRITION_TAB_SCRIPT,
    INGREDIENTS_SCRIPT,
    NUTRITION_ROWS_SCRIPT,
    rows_to_entries,
)
from marketscraper.extractors.dom_utils import COUNT_CARDS_SCRIPT  # noqa: E402
from marketscraper.extractors.listing import extract_products  # noqa: E402
from marketscraper.surface import PlaywrightSurface  # noqa: E402

BASE = '<base href="https://shop.example.com/">'


def _on_page(html: str, action):
    """Load *html* into a fresh page and return ``await action(surface)``."""

    async def _go():
        async with async_api.async_playwright() as playwright:
            try:
                browser = await playwright.chromium.launch(headless=True)
            except async_api.Error as exc:
                pytest.skip(f"Chromium is not available: {exc}")
            try:
                page = await browser.new_page()
                await page.set_content(f"<html><head>{BASE}</head><body>{html}</body></html>")
                return await action(PlaywrightSurface(page))
            finally:
                await browser.close()

    return asyncio.run(_go())


CARDS_HTML = """
<div class="grid">
  <div class="card">
    <a href="/pinar-sut-p-1"><h2 class="title"> Pınar Süt 1 L </h2></a>
    <div class="discount-box">
      <span class="price">42,50 ₺</span>
      <span class="discounted">37,95 ₺</span>
    </div>
  </div>
  <div class="card">
    <a href="/sutas-ayran-p-2"><h2 class="title">Sütaş Ayran</h2></a>
    <div class="price-box"><span class="price">1.049,00 TL</span></div>
    <span class="discounted">1,00 TL</span>
  </div>
  <div class="card">
    <a href="/eker-yogurt-p-3"><h2 class="title">Eker Yoğurt</h2></a>
    <span class="price">30,00 TL</span>
  </div>
  <div class="card">
    <h2 class="title">Fiyatsız Ürün</h2>
  </div>
</div>
"""


def test_card_script_picks_discount_plain_and_fallback_prices(site_config) -> None:
    products = _on_page(CARDS_HTML, lambda surface: extract_products(surface, site_config))

    assert [(p.name, p.price, p.discounted_price) for p in products] == [
        ("Pınar Süt 1 L", 42.5, 37.95),
        ("Sütaş Ayran", 1049.0, None),
        ("Eker Yoğurt", 30.0, None),
    ]
    assert products[0].url == "https://shop.example.com/pinar-sut-p-1"
    assert products[0].brand == "PINAR"


def test_count_script_counts_cards_inside_container(site_config) -> None:
    html = CARDS_HTML + '<div class="card">outside</div>'

    count = _on_page(html, lambda surface: surface.evaluate(COUNT_CARDS_SCRIPT, "div.grid", "div.card"))

    assert count == 4


def test_menu_script_reads_links_inside_menu_only() -> None:
    html = """
    <a href="/c/outside">Outside</a>
    <nav class="categories">
      <a href="/c/meyve-sebze">Meyve</a>
      <a href="https://shop.example.com/c/sut-urunleri">Süt</a>
      <span>no link</span>
    </nav>
    """

    links = _on_page(html, lambda surface: surface.evaluate(MENU_LINKS_SCRIPT, "nav.categories", "a[href]"))

    assert links == [
        "https://shop.example.com/c/meyve-sebze",
        "https://shop.example.com/c/sut-urunleri",
    ]


def test_ingredients_script_reads_sibling_of_exact_label() -> None:
    html = """
    <dl>
      <dt class="desc-key">Ingredients list</dt><dd>wrong</dd>
      <dt class="desc-key"> Ingredients </dt><dd>Un, su, tuz</dd>
    </dl>
    """

    text = _on_page(html, lambda surface: surface.evaluate(INGREDIENTS_SCRIPT, ".desc-key", "Ingredients"))

    assert text == "Un, su, tuz"


def test_ingredients_script_without_label_returns_null() -> None:
    html = '<dt class="desc-key">Storage</dt><dd>Cool place</dd>'

    text = _on_page(html, lambda surface: surface.evaluate(INGREDIENTS_SCRIPT, ".desc-key", "Ingredients"))

    assert text is None


NUTRITION_HTML = """
<button class="tab">Description</button>
<button class="tab">Energy and Nutrients</button>
<div class="nutrition">
  <table>
    <tr><td>Enerji</td><td>64 kcal</td></tr>
    <tr><td>Yağ</td><td>3,5 g</td><td>5%</td></tr>
    <tr><td>Protein</td><td>3,2 g</td></tr>
  </table>
</div>
<script>
  document.querySelectorAll('button.tab')[1]
    .addEventListener('click', () => document.body.dataset.clicked = 'yes');
</script>
"""


def test_nutrition_scripts_click_tab_and_read_rows() -> None:
    async def _read(surface):
        clicked = await surface.evaluate(CLICK_NUTRITION_TAB_SCRIPT, "button.tab", "Energy and Nutrients")
        marker = await surface.evaluate("() => document.body.dataset.clicked || null")
        rows = await surface.evaluate(NUTRITION_ROWS_SCRIPT, "div.nutrition table")
        return clicked, marker, rows

    clicked, marker, rows = _on_page(NUTRITION_HTML, _read)

    assert clicked is True
    assert marker == "yes"
    assert rows == [["Enerji", "64 kcal"], ["Yağ", "3,5 g", "5%"], ["Protein", "3,2 g"]]
    assert [(e.name, e.value) for e in rows_to_entries(rows)] == [
        ("Enerji", "64 kcal"),
        ("Protein", "3,2 g"),
    ]


def test_nutrition_tab_script_reports_missing_tab() -> None:
    clicked = _on_page(
        '<button class="tab">Description</button>',
        lambda surface: surface.evaluate(CLICK_NUTRITION_TAB_SCRIPT, "button.tab", "Energy and Nutrients"),
    )

    assert clicked is False
