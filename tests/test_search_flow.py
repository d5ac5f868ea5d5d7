import asyncio

import pytest

from config.portal import SEARCH_INPUT_SELECTORS
from conftest import DASHBOARD_URL, SEARCH_URL, FakePage
from genesis_comps.browser.locator import ElementLocator
from genesis_comps.exceptions import ElementNotFound, SearchInputNotFound
from genesis_comps.scrapers.search_flow import NO_LOADING_INDICATORS_JS, SearchFlow, SearchState

SEARCH_SEL = SEARCH_INPUT_SELECTORS[1]


def _flow(page, human) -> SearchFlow:
    return SearchFlow(page, ElementLocator(page), human, SEARCH_URL)


def test_search_types_location_and_commits_with_enter(human):
    page = FakePage(url=DASHBOARD_URL, visible={SEARCH_SEL})

    state = asyncio.run(_flow(page, human).perform_search("Texas"))

    assert state is SearchState.RESULTS_LOADED
    assert page.calls("goto") == [SEARCH_URL]
    assert page.typed[SEARCH_SEL] == "Texas"
    assert page.keyboard.pressed[-1] == "Enter"
    assert page.calls("focus") == [SEARCH_SEL]
    assert NO_LOADING_INDICATORS_JS in page.calls("wait_function")


def test_spinner_timeout_is_not_fatal(human):
    page = FakePage(visible={SEARCH_SEL}, functions={NO_LOADING_INDICATORS_JS: False})

    state = asyncio.run(_flow(page, human).perform_search("Dallas, TX"))

    assert state is SearchState.RESULTS_LOADED


def test_missing_search_input_is_fatal(human):
    page = FakePage()
    flow = _flow(page, human)

    with pytest.raises(SearchInputNotFound) as excinfo:
        asyncio.run(flow.perform_search("Texas"))

    assert isinstance(excinfo.value, ElementNotFound)
    assert excinfo.value.attempted[: len(SEARCH_INPUT_SELECTORS)] == tuple(SEARCH_INPUT_SELECTORS)
    assert flow.state is SearchState.ON_SEARCH_PAGE
    assert page.keyboard.pressed == []
