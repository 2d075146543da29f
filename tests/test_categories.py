"""Tests for category metadata."""

import pytest

from news_admin.categories import NEUTRAL_COLOR, Category


def test_options_are_ordered_and_complete():
    options = Category.options()
    assert [option.value for option in options] == [
        "politics_pt",
        "politics_br",
        "politics_world",
        "controversies",
        "conflicts",
        "disasters",
    ]
    assert all(option.label and option.color for option in options)


def test_colors_are_distinct():
    colors = [option.color for option in Category.options()]
    assert len(set(colors)) == len(colors)
    assert NEUTRAL_COLOR not in colors


@pytest.mark.parametrize("value", ["", "sports", None, "  "])
def test_parse_unknown_returns_none(value):
    assert Category.parse(value) is None


def test_parse_known():
    assert Category.parse(" conflicts ") is Category.conflicts
    assert Category.parse(Category.disasters) is Category.disasters


def test_describe_known_and_unknown():
    assert Category.describe("politics_world").label == "Politica Mundial"
    unknown = Category.describe("sports")
    assert unknown.label == "sports"
    assert unknown.color == NEUTRAL_COLOR
