"""
Unit tests for form key normalization.

Tests cover:
- normalize_key: case, whitespace, hyphens, aliases, idempotence
- normalize_fields: value trimming, list coercion, collisions
"""

import pytest

from lambdas.submit_report.field_normalizer import (
    FIELD_ALIASES,
    normalize_fields,
    normalize_key,
    stringify_value,
)


class TestNormalizeKey:
    """Tests for normalize_key."""

    @pytest.mark.parametrize(
        "raw_key",
        ["Full Name", "full-name", "fullname", "name", "passenger_name", "  FULL_NAME ", "Passenger Name"],
    )
    def test_name_variants_map_to_full_name(self, raw_key):
        """Test that every passenger-name variant becomes full_name."""
        assert normalize_key(raw_key) == "full_name"

    def test_collapses_runs_of_separators(self):
        """Test that mixed whitespace and hyphen runs collapse to one underscore."""
        assert normalize_key("Damage - \t Desc") == "damage_desc"

    def test_keeps_unknown_keys(self):
        """Test that keys outside the alias table pass through canonicalized."""
        assert normalize_key("Bag Tag") == "bag_tag"
        assert normalize_key("uploads[]") == "uploads[]"

    @pytest.mark.parametrize(
        "raw_key",
        ["Full Name", "Incident-Type", "purchase price", "FAX", "a--b  c", "", "name"],
    )
    def test_idempotent(self, raw_key):
        """Test that normalizing a normalized key changes nothing."""
        once = normalize_key(raw_key)
        assert normalize_key(once) == once

    def test_alias_targets_are_canonical(self):
        """Test that alias targets are already normalized."""
        for target in FIELD_ALIASES.values():
            assert normalize_key(target) == target

    def test_none_key(self):
        """Test that a missing key normalizes to an empty string."""
        assert normalize_key(None) == ""


class TestStringifyValue:
    """Tests for stringify_value."""

    def test_list_joins_with_commas(self):
        """Test that repeated form values are joined."""
        assert stringify_value(["a", "b"]) == "a,b"

    def test_none_is_empty(self):
        assert stringify_value(None) == ""


class TestNormalizeFields:
    """Tests for normalize_fields."""

    def test_trims_values(self):
        """Test that values are trimmed."""
        fields = normalize_fields({"Flight": "  UP301 \n"})

        assert fields == {"flight": "UP301"}

    def test_last_alias_wins(self):
        """Test that the last raw key for a canonical key wins."""
        fields = normalize_fields({"name": "First", "Full Name": "Second"})

        assert fields == {"full_name": "Second"}

    def test_all_values_are_strings(self):
        """Test that lists and None coerce to strings."""
        fields = normalize_fields({"tags": ["x", "y"], "empty": None})

        assert fields == {"tags": "x,y", "empty": ""}
        assert all(isinstance(value, str) for value in fields.values())
