from __future__ import annotations

import pytest

from geo.coords import classify_input, has_text, parse_coordinates


def test_parses_decimal_pair_with_comma():
    pos = parse_coordinates("55.75, 37.61")
    assert pos is not None
    assert pos.lat == pytest.approx(55.75)
    assert pos.lon == pytest.approx(37.61)


@pytest.mark.parametrize("text", ["55.75 37.61", "55.75;37.61", "  55.75 ,37.61  "])
def test_parses_other_separators(text):
    pos = parse_coordinates(text)
    assert pos is not None
    assert (pos.lat, pos.lon) == pytest.approx((55.75, 37.61))


def test_parses_degrees_minutes_seconds_with_hemispheres():
    pos = parse_coordinates("55°45'00\"N 37°36'36\"E")
    assert pos is not None
    assert pos.lat == pytest.approx(55.75)
    assert pos.lon == pytest.approx(37.61)


def test_east_first_swaps_order_and_west_negates():
    pos = parse_coordinates("37.6E 55.7N")
    assert pos is not None
    assert (pos.lat, pos.lon) == pytest.approx((55.7, 37.6))

    pos = parse_coordinates("40.7N 74.0W")
    assert pos is not None
    assert (pos.lat, pos.lon) == pytest.approx((40.7, -74.0))


def test_negative_sign_is_kept():
    pos = parse_coordinates("-33.86, 151.21")
    assert pos is not None
    assert pos.lat == pytest.approx(-33.86)


@pytest.mark.parametrize(
    "text",
    [
        "Acme",
        "FSC-C101001",
        "",
        "123.0, 10.0",  # latitude out of range
        "10, 200",  # longitude out of range
        "55°75'N 37°E",  # minutes >= 60
        "55N 37N",  # both latitudes
        "55.75",
    ],
)
def test_rejects_non_coordinates(text):
    assert parse_coordinates(text) is None


def test_classify_input():
    assert classify_input("55.75, 37.61") == "coordinates"
    assert classify_input("Acme Holdings") == "text"


def test_has_text():
    assert has_text("a")
    assert not has_text("")
    assert not has_text("  \t\n")
    assert not has_text(None)
