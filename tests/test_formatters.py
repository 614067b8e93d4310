# tests/test_formatters.py

import pytest

from core.formatters import (
    format_score,
    format_score_for_entry,
    format_weight_percent,
    parse_score_input,
)


def test_parse_score_input_accepts_comma_separator():
    assert parse_score_input("4,5") == 4.5


def test_parse_score_input_blank_means_ungraded():
    assert parse_score_input("  ") is None
    assert parse_score_input(None) is None


def test_parse_score_input_does_not_clamp():
    assert parse_score_input(9) == 9.0


def test_parse_score_input_rejects_text():
    with pytest.raises(TypeError):
        parse_score_input("four")


def test_format_score():
    assert format_score(4.0) == "4.00"
    assert format_score(None) == "N/A"
    assert format_score(None, placeholder="-") == "-"


def test_format_score_for_entry():
    assert format_score_for_entry(3.46) == "3,5"
    assert format_score_for_entry(None) == ""


def test_format_weight_percent():
    assert format_weight_percent(0.25) == "25%"
    assert format_weight_percent(1.2) == "120%"
