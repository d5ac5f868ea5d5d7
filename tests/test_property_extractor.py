import asyncio

from config.portal import LAND_TAB_SELECTOR, TABPANEL_SELECTOR
from conftest import FakePage
from genesis_comps.scrapers.property_extractor import SCAN_PANEL_JS, PropertyExtractor, pairs_to_mapping

BASE_PAIRS = [
    ["  Bedrooms ", " 3 "],
    ["Bathrooms", "2"],
    ["", "orphan value"],
    ["Pool", "   "],
]
LAND_PAIRS = [["Lot Size", "0.25 acres"], ["Zoning", "SF-6"]]


def _page(base=BASE_PAIRS, land=LAND_PAIRS) -> FakePage:
    page = FakePage(
        visible={TABPANEL_SELECTOR, LAND_TAB_SELECTOR},
        scripts={SCAN_PANEL_JS: lambda _arg: land if page.state.get("tab") == "land" else base},
    )
    page.on_click[LAND_TAB_SELECTOR] = lambda p: p.state.update(tab="land")
    return page


def test_pairs_are_trimmed_and_empty_ones_dropped():
    mapping = pairs_to_mapping(BASE_PAIRS + [None, ["only-label"], [None, "x"]])

    assert mapping == {"Bedrooms": "3", "Bathrooms": "2"}
    assert all(k == k.strip() and v == v.strip() and k and v for k, v in mapping.items())


def test_extract_reads_base_then_land_tab(human):
    page = _page()

    panels = asyncio.run(PropertyExtractor(page, human).extract())

    assert panels.property_info == {"Bedrooms": "3", "Bathrooms": "2"}
    assert panels.land_info == {"Lot Size": "0.25 acres", "Zoning": "SF-6"}
    assert panels.is_complete
    assert page.calls("click") == [LAND_TAB_SELECTOR]


def test_empty_land_tab_is_incomplete_not_an_error(human):
    page = _page(land=[["Zoning", ""]])

    panels = asyncio.run(PropertyExtractor(page, human).extract())

    assert panels.property_info
    assert panels.land_info == {}
    assert not panels.is_complete
