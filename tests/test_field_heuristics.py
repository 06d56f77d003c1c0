from __future__ import annotations

import random

import pytest

from lawrence_gis.utils import field_heuristics as fh


def test_parse_acreage_converts_square_feet() -> None:
    assert fh.parse_acreage("52000 sq ft") == pytest.approx(1.1937, abs=1e-3)


def test_parse_acreage_keeps_plain_acres() -> None:
    assert fh.parse_acreage("0.57") == pytest.approx(0.57)
    assert fh.parse_acreage("12.5 AC") == pytest.approx(12.5)


def test_parse_acreage_large_value_without_sq_is_acres() -> None:
    assert fh.parse_acreage("1500") == pytest.approx(1500.0)


@pytest.mark.parametrize("text", [None, "", "N/A", "0", "0.00"])
def test_parse_acreage_defaults_when_missing_or_zero(text: str | None) -> None:
    assert fh.parse_acreage(text) == 0.1


def test_parse_acreage_defaults_when_value_overflows() -> None:
    assert fh.parse_acreage("9" * 400) == 0.1


def test_parse_assessed_value_from_cell() -> None:
    assert fh.parse_assessed_value("$123,400") == 123400


def test_parse_assessed_value_falls_back_to_page_text() -> None:
    page = "Current Value\nTotal Assessment $55,000\nLand"
    assert fh.parse_assessed_value("N/A", page) == 55000
    assert fh.parse_assessed_value(None, "assessment  $1,200") == 1200


def test_parse_assessed_value_none_when_absent() -> None:
    assert fh.parse_assessed_value(None, "no values here") is None
    assert fh.parse_assessed_value("", None) is None


def test_parse_assessed_value_keeps_zero_assessment() -> None:
    assert fh.parse_assessed_value("$0", "no values here") == 0
    assert fh.parse_assessed_value("$0", "Total Assessment $9,500") == 9500


def test_pick_owner_name_skips_addresses() -> None:
    assert fh.pick_owner_name(["123 MAIN ST", "John Smith"]) == "John Smith"


@pytest.mark.parametrize(
    "candidate",
    [
        "456 OAK AVE",
        "PO BOX 12 NEW CASTLE",
        "SMITH JOHN PA 16101",
        "12 N MERCER",
        "x" * 101,
        "   ",
    ],
)
def test_pick_owner_name_rejects_non_names(candidate: str) -> None:
    assert fh.pick_owner_name([candidate]) == "Unknown"


def test_pick_owner_name_keeps_name_with_st_inside_word() -> None:
    assert fh.pick_owner_name(["STACY STEWART"]) == "STACY STEWART"


def test_resolve_address_prefers_location_cell() -> None:
    assert fh.resolve_address("123 MAIN ST", ["9 OTHER RD"], [], "anchor") == "123 MAIN ST"


def test_resolve_address_uses_heading_then_blocks() -> None:
    assert fh.resolve_address("", ["Parcel Details", "77 ELM DR"], [], "anchor") == "77 ELM DR"
    blocks = ["Owner 12 FAKE NAME", "8 PINE LN"]
    assert fh.resolve_address(None, [], blocks, "anchor") == "8 PINE LN"


def test_resolve_address_falls_back_to_anchor_text() -> None:
    long_heading = "12 " + "A" * 60
    assert fh.resolve_address("Unknown", [long_heading], ["no digits"], "5 ANCHOR ST") == "5 ANCHOR ST"


def test_resolve_address_only_scans_first_ten_blocks() -> None:
    blocks = ["filler"] * 10 + ["99 LATE ST"]
    assert fh.resolve_address(None, [], blocks, "fallback") == "fallback"


def test_normalize_township_maps_district_label() -> None:
    assert fh.normalize_township("District 4: Wilmington Township   ") == "Wilmington"


def test_normalize_township_reads_html_when_text_has_no_district() -> None:
    html = "<td>District 12: Neshannock Twp</td>"
    assert fh.normalize_township("nothing useful", html) == "Neshannock"


def test_normalize_township_keeps_short_unmapped_name() -> None:
    assert fh.normalize_township("District 7: Volant Borough\nmore") == "Volant Borough"


def test_normalize_township_uses_synonyms_without_district() -> None:
    assert fh.normalize_township("Located in   Union   Township near the river") == "Union"


def test_normalize_township_defaults_to_new_castle() -> None:
    assert fh.normalize_township("Welcome to the portal") == "New Castle"
    assert fh.normalize_township(None) == "New Castle"


def test_normalize_township_is_deterministic() -> None:
    text = "District 2: Ellwood City Boro   "
    assert fh.normalize_township(text) == fh.normalize_township(text) == "Ellwood City"


def test_resolve_city_prefers_clean_label() -> None:
    assert fh.resolve_city("Shenango", "District 1: Taylor   ") == "Shenango"
    assert fh.resolve_city("<b>odd</b>", "District 1: Taylor   ") == "Taylor"


def test_property_link_text_filters() -> None:
    assert fh.is_property_link_text("123 MAIN ST")
    assert fh.is_property_link_text("4 Meadow Lane")
    assert not fh.is_property_link_text("MAIN ST")
    assert not fh.is_property_link_text("12 HIGHLAND AVE")  # "land"
    assert not fh.is_property_link_text("1 A ST")  # too short
    assert fh.is_loose_link_text("Lot 12 Block C")
    assert not fh.is_loose_link_text("Next")


def test_absolute_href() -> None:
    origin = "https://gis.vgsi.com"
    assert fh.absolute_href("/lawrencecountypa/Parcel.aspx?pid=1", origin) == (
        "https://gis.vgsi.com/lawrencecountypa/Parcel.aspx?pid=1"
    )
    assert fh.absolute_href("Parcel.aspx?pid=1", origin) == "https://gis.vgsi.com/Parcel.aspx?pid=1"
    assert fh.absolute_href("https://example.com/x", origin) == "https://example.com/x"


def test_shuffled_is_seedable_and_non_mutating() -> None:
    items = list(range(20))
    first = fh.shuffled(items, random.Random(3))
    second = fh.shuffled(items, random.Random(3))

    assert first == second
    assert sorted(first) == items
    assert items == list(range(20))
