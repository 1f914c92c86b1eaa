import pytest

from core.models import UNKNOWN_YEAR, CatalogEntry
from core.services.year_classifier import (
    build_year_index,
    count_year_buckets,
    extract_year,
    match_iso_date,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("1983-01-01T00:00:00Z", "1983"),
        ("1983-05-01", "1983"),
        ("1983", "1983"),
        ("March 3, 1987", "1987"),
        ("3 Mar 1991", "1991"),
        ("garbage", UNKNOWN_YEAR),
        ("", UNKNOWN_YEAR),
        ("   ", UNKNOWN_YEAR),
        (None, UNKNOWN_YEAR),
        ("March 3", UNKNOWN_YEAR),
        ("Unknown", UNKNOWN_YEAR),
    ],
)
def test_extract_year(value, expected):
    assert extract_year(value) == expected


def test_iso_prefix_is_read_without_parsing():
    # Month 13 would fail a real parse; the prefix match takes only the year
    assert extract_year("1999-13-45 whatever") == "1999"
    assert match_iso_date("19-01-01") is None


def test_matchers_are_tried_in_order():
    calls = []

    def first(value):
        calls.append("first")
        return None

    def second(value):
        calls.append("second")
        return "2001"

    def third(value):
        calls.append("third")
        return "1999"

    assert extract_year("x", matchers=(first, second, third)) == "2001"
    assert calls == ["first", "second"]


@pytest.mark.parametrize("value", ["\x00\x01", "99999999999999999999", "////", "💾"])
def test_never_raises(value):
    result = extract_year(value)
    assert result == UNKNOWN_YEAR or (len(result) == 4 and result.isdigit())


def test_build_year_index_first_entry_wins():
    entries = [
        CatalogEntry.from_dict({"identifier": "a", "date": "1984-01-01"}),
        CatalogEntry.from_dict({"identifier": "a", "date": "1990"}),
        CatalogEntry.from_dict({"identifier": "b"}),
        CatalogEntry.from_dict({"date": "1970"}),
    ]
    assert build_year_index(entries) == {"a": "1984", "b": UNKNOWN_YEAR}


def test_count_year_buckets_keeps_unknown():
    counts = count_year_buckets(["1983", UNKNOWN_YEAR, "1983"])
    assert counts == {"1983": 2, UNKNOWN_YEAR: 1}


def test_unparseable_date_is_logged_as_warning(captured_warnings):
    assert extract_year("sometime soon") == UNKNOWN_YEAR
    assert extract_year(None) == UNKNOWN_YEAR
    assert extract_year("1983") == "1983"

    assert len(captured_warnings) == 1
    assert "'sometime soon'" in captured_warnings[0]
