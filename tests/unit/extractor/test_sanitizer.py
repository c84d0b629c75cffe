"""
Unit tests for the item list sanitizer.
"""

import pytest
from schemacore.extractor.sanitizer import is_valid_label, item_name, sanitize, sanitize_skills


def test_rejects_placeholder_numeric_and_short_items():
    assert sanitize(["field_5f3a2b1c", "12345", "Phillips screwdriver", "a"]) == ["Phillips screwdriver"]


@pytest.mark.parametrize(
    "label",
    [
        "",
        "42",
        "3.5",
        "12:34",
        "field_abc123",
        "Default",
        "<b>Hammer</b>",
        "x" * 201,
        "First sentence. Second sentence. Third sentence.",
        "one, two, three, four, five",
    ],
)
def test_invalid_labels(label):
    assert not is_valid_label(label)


@pytest.mark.parametrize("label", ["Hammer", "Wood glue", "5 mm drill bit", "Screws, nails and pins", "Ok"])
def test_valid_labels(label):
    assert is_valid_label(label)


def test_order_is_preserved_and_strings_are_trimmed():
    assert sanitize(["  Saw ", "99", "Level", "default", "Tape measure"]) == ["Saw", "Level", "Tape measure"]


def test_mapping_and_row_items_are_kept_whole():
    tool = {"name": "Cordless drill", "url": "https://example.com/drill"}
    row = ["Sandpaper", "120 grit"]
    result = sanitize([tool, {"name": "field_00ff"}, row, ["7"], {"label": "no name"}])
    assert result == [tool, row]


def test_non_list_input():
    assert sanitize(None) == []
    assert sanitize("Hammer") == []


def test_item_name():
    assert item_name("Glue") == "Glue"
    assert item_name({"name": "Glue"}) == "Glue"
    assert item_name(["Glue", 2]) == "Glue"
    assert item_name(42) is None


class TestSanitizeSkills:
    def test_comma_separated_string(self):
        assert sanitize_skills("Python, SQL, R, data modelling") == ["Python", "SQL", "data modelling"]

    def test_list_input(self):
        assert sanitize_skills(["Budgeting", "  ", "field_12ab", "1:2", "Excel"]) == ["Budgeting", "Excel"]

    def test_single_value(self):
        assert sanitize_skills("Negotiation") == ["Negotiation"]

    def test_empty_values(self):
        assert sanitize_skills(None) == []
        assert sanitize_skills("") == []
        assert sanitize_skills(12) == []
