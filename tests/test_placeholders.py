"""
Tests for placeholder filtering of raw vendor strings.
"""

import pytest

from hwvault.classification.placeholders import (
    PLACEHOLDER_VALUES,
    filter_placeholder,
    is_placeholder,
    or_unknown,
)


@pytest.mark.parametrize("value", [
    "To Be Filled By O.E.M.",
    "  to be filled by o.e.m.  ",
    "Default string",
    "DEFAULT STRING",
    "System Product Name",
    "System Serial Number",
    "Type1ProductConfigId",
    "x.x",
    "N/A",
    "Base Board Serial Number",
    "FFFFFFFF-FFFF-FFFF-FFFF-FFFFFFFFFFFF",
])
def test_known_placeholders_are_removed(value):
    assert filter_placeholder(value) is None


@pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
def test_absent_and_blank_values(value):
    assert filter_placeholder(value) is None


@pytest.mark.parametrize("value", ["00000000", "0000-0000-0000", "0000 0000 0000 0000"])
def test_all_zero_serials_are_removed(value):
    assert filter_placeholder(value) is None


def test_short_zero_values_are_kept():
    assert filter_placeholder("0") == "0"
    assert filter_placeholder("000") == "000"


def test_real_values_are_trimmed():
    assert filter_placeholder("  ASUSTeK COMPUTER INC.  ") == "ASUSTeK COMPUTER INC."
    assert filter_placeholder("ROG STRIX X570-E GAMING") == "ROG STRIX X570-E GAMING"


def test_placeholder_substrings_do_not_match():
    # Only whole-value matches are placeholders
    assert filter_placeholder("Default Router") == "Default Router"
    assert filter_placeholder("Unknown Vendor Inc") == "Unknown Vendor Inc"


def test_non_strings_are_stringified():
    assert filter_placeholder(3200) == "3200"
    assert filter_placeholder(12.5) == "12.5"


@pytest.mark.parametrize("value", [
    None, "", " Default string ", "Samsung", "  spaced  ", "00000000", 42, "n/a",
])
def test_filter_is_idempotent(value):
    once = filter_placeholder(value)
    assert filter_placeholder(once) == once


def test_vocabulary_is_lower_case():
    assert all(v == v.lower() for v in PLACEHOLDER_VALUES)


def test_or_unknown():
    assert or_unknown("Default string") == "Unknown"
    assert or_unknown(None, default="N/A") == "N/A"
    assert or_unknown(" Dell Inc. ") == "Dell Inc."


def test_is_placeholder():
    assert is_placeholder("To be filled by O.E.M.")
    assert not is_placeholder("Micro-Star International Co., Ltd.")
