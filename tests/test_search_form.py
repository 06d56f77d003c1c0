from __future__ import annotations

import asyncio
from typing import Any

import pytest
from playwright.async_api import Error as PlaywrightError

from lawrence_gis.models import SearchCriteria
from lawrence_gis.scrapers import search_form
from lawrence_gis.scrapers.search_form import FormSubmissionError, SearchFormFiller


class _FakeHandle:
    def __init__(self, name: str, fail: bool = False) -> None:
        self.name = name
        self.fail = fail
        self.clicks = 0

    async def click(self, **kwargs: Any) -> None:
        if self.fail:
            raise PlaywrightError(f"{self.name} detached")
        self.clicks += 1


class _FakePage:
    """Answers the form filler's queries from canned inputs, handles and clickable selectors."""

    def __init__(
        self,
        inputs: list[dict[str, Any]] | None = None,
        handles: dict[str, _FakeHandle] | None = None,
        groups: dict[str, list[_FakeHandle]] | None = None,
        clickable: set[str] | None = None,
        land_fields: bool = False,
    ) -> None:
        self.inputs = inputs or []
        self.handles = handles or {}
        self.groups = groups or {}
        self.clickable = clickable or set()
        self.land_fields = land_fields
        self.typed: list[tuple[str, str]] = []
        self.clicked: list[str] = []
        self.land_args: dict[str, Any] | None = None

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == search_form.INPUTS_SCRIPT:
            return self.inputs
        if script == search_form.LAND_RANGE_SCRIPT:
            self.land_args = arg
            return self.land_fields
        raise AssertionError("unexpected script")

    async def find_first(self, selectors: list[str]) -> tuple[str, _FakeHandle] | None:
        for selector in selectors:
            if selector in self.handles:
                return selector, self.handles[selector]
        return None

    async def find_all(self, selector: str) -> list[_FakeHandle]:
        return self.groups.get(selector, [])

    async def click(self, selector: str, timeout_ms: int = 0) -> None:
        if selector not in self.clickable:
            raise PlaywrightError(f"Timeout waiting for {selector}")
        self.clicked.append(selector)

    async def type_over(self, handle: _FakeHandle, text: str) -> None:
        self.typed.append((handle.name, text))


def _criteria() -> SearchCriteria:
    return SearchCriteria(min_acreage=0.5, max_acreage=2)


def test_check_models_clicks_first_pattern_with_matches() -> None:
    boxes = [_FakeHandle("m1"), _FakeHandle("m2", fail=True), _FakeHandle("m3")]
    page = _FakePage(groups={'input[type="checkbox"][name*="Model"]': boxes})

    assert asyncio.run(SearchFormFiller(page).check_models()) is True
    assert [b.clicks for b in boxes] == [1, 0, 1]


def test_check_models_reports_failure_when_nothing_clicked() -> None:
    assert asyncio.run(SearchFormFiller(_FakePage()).check_models()) is False


def test_set_acreage_range_fills_first_two_small_decimal_inputs() -> None:
    inputs = [
        {"id": "txtOwner", "type": "text", "value": ""},
        {"id": "MainContent_txtLandFrom", "type": "text", "value": "0"},
        {"id": "MainContent_txtLandTo", "type": "text", "value": "0.0"},
        {"id": "txtYear", "type": "text", "value": "1990"},
    ]
    handles = {
        'input[id="MainContent_txtLandFrom"]': _FakeHandle("from"),
        'input[id="MainContent_txtLandTo"]': _FakeHandle("to"),
    }
    page = _FakePage(inputs=inputs, handles=handles)

    assert asyncio.run(SearchFormFiller(page).set_acreage_range(_criteria())) is True
    assert page.typed == [("from", "0.5"), ("to", "2")]


def test_set_acreage_range_needs_two_candidates() -> None:
    page = _FakePage(inputs=[{"id": "only", "type": "text", "value": "1"}])

    assert asyncio.run(SearchFormFiller(page).set_acreage_range(_criteria())) is False
    assert page.typed == []


def test_set_price_range_prefers_known_field_pair() -> None:
    handles = {
        'input[name="ctl00$MainContent$txtSalePriceFrom"]': _FakeHandle("min"),
        'input[name="ctl00$MainContent$txtSalePriceTo"]': _FakeHandle("max"),
    }
    page = _FakePage(handles=handles)

    assert asyncio.run(SearchFormFiller(page).set_price_range()) is True
    assert page.typed == [("min", "80000"), ("max", "9999999")]


def test_set_price_range_falls_back_to_inspected_fields() -> None:
    inputs = [
        {"id": "SaleDateFrom", "type": "text", "value": "01/01/2020", "className": "datepicker"},
        {"id": "PriceLow", "type": "text", "value": "0", "className": ""},
        {"id": "PriceHigh", "type": "text", "value": "0", "className": ""},
    ]
    handles = {
        'input[id="PriceLow"]': _FakeHandle("low"),
        'input[id="PriceHigh"]': _FakeHandle("high"),
    }
    page = _FakePage(inputs=inputs, handles=handles)

    assert asyncio.run(SearchFormFiller(page).set_price_range()) is True
    assert page.typed == [("low", "80000"), ("high", "9999999")]


def test_price_candidates_drop_date_fields() -> None:
    inputs = [
        {"id": "txtSaleDateFrom", "type": "text", "value": "01/01/2020", "className": "datepicker"},
        {"id": "SalePriceMin", "type": "text", "value": "0", "className": ""},
        {"id": "SalePriceMax", "type": "text", "value": "0", "className": ""},
        {"id": "misc", "type": "text", "value": "25000", "className": ""},
        {"id": "hidden", "type": "hidden", "value": "99999", "className": ""},
    ]

    candidates = search_form.price_field_candidates(inputs)
    kept = search_form.filter_price_fields(candidates)

    assert [c["id"] for c in candidates] == ["txtSaleDateFrom", "SalePriceMin", "SalePriceMax", "misc"]
    assert [k["id"] for k in kept] == ["SalePriceMin", "SalePriceMax", "misc"]


def test_select_all_styles_uses_check_all_id() -> None:
    page = _FakePage(clickable={"#chkAllStyle"})

    assert asyncio.run(SearchFormFiller(page).select_all_styles()) is True
    assert page.clicked == ["#chkAllStyle"]


def test_select_all_styles_falls_back_to_individual_boxes() -> None:
    boxes = [_FakeHandle("s1"), _FakeHandle("s2")]
    page = _FakePage(groups={'input[type="checkbox"][id*="Style"]': boxes})

    assert asyncio.run(SearchFormFiller(page).select_all_styles()) is True
    assert all(b.clicks == 1 for b in boxes)


def test_submit_returns_first_working_selector() -> None:
    page = _FakePage(clickable={'input[value*="Search"]', 'button:has-text("Search")'})

    assert asyncio.run(SearchFormFiller(page).submit()) == 'input[value*="Search"]'


def test_submit_raises_when_no_control_works() -> None:
    with pytest.raises(FormSubmissionError):
        asyncio.run(SearchFormFiller(_FakePage()).submit())


def test_set_land_range_writes_known_fields_directly() -> None:
    page = _FakePage(land_fields=True)

    assert asyncio.run(SearchFormFiller(page).set_land_range(_criteria())) is True
    assert page.land_args["minId"] == "MainContent_txtLandFrom"
    assert page.land_args["minValue"] == "0.5"
    assert page.land_args["maxValue"] == "2"


def test_prepare_reports_each_step() -> None:
    page = _FakePage(clickable={"#chkAllStyle"})

    flags = asyncio.run(SearchFormFiller(page).prepare(_criteria()))

    assert flags == {"models": False, "acreage": False, "price": False, "styles": True}
