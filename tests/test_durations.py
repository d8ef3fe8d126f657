import pytest

from cachedirective.durations import format_duration, parse_duration


@pytest.mark.parametrize(
    "text, expected",
    [("10s", 10), ("120s", 120), ("1000s", 1000), ("5s", 5), ("0", 0), ("+5s", 5)],
)
def test_parse_whole_seconds(text, expected):
    assert parse_duration(text) == expected


def test_parse_fractional_and_small_units():
    assert parse_duration("300ms") == pytest.approx(0.3)
    assert parse_duration("1.5h") == 5400


def test_parse_combined_components_add_up():
    assert parse_duration("1h30m") == parse_duration("1h") + parse_duration("30m")
    assert parse_duration("2m5s") == parse_duration("2m") + parse_duration("5s")


def test_parse_negative_is_opposite_of_positive():
    assert parse_duration("-90s") == -parse_duration("90s")


def test_parse_micro_units_agree():
    assert parse_duration("15us") == parse_duration("15\u00b5s") == parse_duration("15\u03bcs")


@pytest.mark.parametrize("text", ["", "-", "10", "abc", ".s", "5x", "1h2", "1..5s"])
def test_parse_rejects_invalid(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_parse_rejects_overflow():
    with pytest.raises(ValueError):
        parse_duration("9999999999h")


def test_format_zero():
    assert format_duration(0) == "0s"


@pytest.mark.parametrize(
    "text", ["1h0m0s", "2m0s", "1.5s", "300ms", "1.5\u00b5s", "42ns", "-1m30s", "5s"]
)
def test_format_of_parse_is_identity(text):
    assert format_duration(parse_duration(text)) == text


@pytest.mark.parametrize("seconds", [5, 10, 120, 0.25, 3723.5, 0.000001, -90, 1000])
def test_parse_of_format_is_identity(seconds):
    assert parse_duration(format_duration(seconds)) == pytest.approx(seconds)