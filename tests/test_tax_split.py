# tests/test_tax_split.py
"""Tests for CGST / SGST / IGST bucketing by place of supply."""

from decimal import Decimal

import pytest

from books_engine.domain.models.documents import LineItem
from books_engine.domain.services.line_calculator import compute_lines
from books_engine.domain.services.tax_split import (
    is_intra_state,
    normalize_state,
    split_tax,
    tax_heads,
)


def _taxed(rate: str, tax: str) -> LineItem:
    return LineItem(tax_rate=Decimal(rate), tax_amount=Decimal(tax))


class TestIntraStateDetection:

    def test_exact_match_after_trim_and_case_fold(self):
        assert is_intra_state("Maharashtra", "  maharashtra ")
        assert is_intra_state("KARNATAKA", "Karnataka")

    def test_different_states(self):
        assert not is_intra_state("Maharashtra", "Karnataka")

    def test_no_substring_matching(self):
        assert not is_intra_state("Maharashtra", "27-Maharashtra")
        assert not is_intra_state("", "Maharashtra")

    def test_both_missing_counts_as_same(self):
        assert is_intra_state(None, "")
        assert normalize_state(None) == ""


# ---------------------------------------------------------------------------
# GST18 line with ₹18 tax
# ---------------------------------------------------------------------------
def test_intra_state_split_halves_rate_and_amount():
    split = split_tax([_taxed("18", "18")], "Maharashtra", "Maharashtra")
    assert split == {"CGST9": Decimal("9"), "SGST9": Decimal("9")}


def test_inter_state_split_is_igst():
    split = split_tax([_taxed("18", "18")], "Karnataka", "Maharashtra")
    assert split == {"IGST18": Decimal("18")}


def test_buckets_accumulate_and_keep_first_seen_order():
    lines = [
        _taxed("18", "36"),
        _taxed("5", "2.5"),
        _taxed("18", "18"),
        _taxed("0", "0"),
    ]
    split = split_tax(lines, "Goa", "goa")
    assert list(split) == ["CGST9", "SGST9", "CGST2.5", "SGST2.5"]
    assert split["CGST9"] == Decimal("27")
    assert split["SGST2.5"] == Decimal("1.25")

    split = split_tax(lines, "Goa", "Kerala")
    assert list(split) == ["IGST18", "IGST5"]
    assert split["IGST18"] == Decimal("54")


def test_zero_rate_lines_are_skipped():
    assert split_tax([_taxed("0", "0"), LineItem()], "Goa", "Goa") == {}


def test_fractional_rate_labels():
    split = split_tax([_taxed("0.25", "1")], "Goa", "Goa")
    assert list(split) == ["CGST0.125", "SGST0.125"]


@pytest.mark.parametrize("source, destination", [("Goa", "Goa"), ("Goa", "Kerala")])
def test_split_conserves_tax_total(tax_rates, source, destination):
    lines = compute_lines(
        [
            {"quantity": 3, "rate": "333.33", "taxCode": "GST18"},
            {"quantity": 1, "rate": "99.99", "discount": 7, "taxCode": "GST5"},
            {"quantity": 2, "rate": "1234.5", "taxCode": "GST28"},
            {"quantity": 4, "rate": 10, "taxCode": "none"},
        ],
        tax_rates,
    )
    tax_total = sum(line.tax_amount for line in lines)
    split = split_tax(lines, source, destination)
    assert sum(split.values()) == tax_total


def test_tax_heads():
    split = {"CGST9": Decimal("9"), "SGST9": Decimal("9"), "CGST2.5": Decimal("1"), "SGST2.5": Decimal("1")}
    assert tax_heads(split) == {"cgst": Decimal("10"), "sgst": Decimal("10"), "igst": Decimal("0")}
    assert tax_heads({"IGST18": Decimal("18")})["igst"] == Decimal("18")
