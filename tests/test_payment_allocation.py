# tests/test_payment_allocation.py
"""Tests for oldest-first payment allocation and manual allocation overrides."""

import logging
from decimal import Decimal

import pytest

from books_engine.domain.models.allocation import AUTO, MANUAL, Obligation
from books_engine.domain.services.payment_allocation import allocate, summarize_payment


def _amounts(result) -> dict:
    return dict(result.allocations)


# ---------------------------------------------------------------------------
# 1. Oldest-first sweep: Jan-1 ₹100, Jan-5 ₹200, Jan-10 ₹50
# ---------------------------------------------------------------------------
class TestAutoAllocation:

    def test_partial_payment(self, jan_obligations):
        result = allocate(Decimal("250"), jan_obligations)

        assert result.mode == AUTO
        assert _amounts(result) == {
            "BILL-003": Decimal("0"),
            "BILL-001": Decimal("100"),
            "BILL-002": Decimal("150"),
        }
        assert result.excess == Decimal("0")

    def test_overpayment_leaves_excess(self, jan_obligations):
        result = allocate(400, jan_obligations)

        assert _amounts(result) == {
            "BILL-003": Decimal("50"),
            "BILL-001": Decimal("100"),
            "BILL-002": Decimal("200"),
        }
        assert result.excess == Decimal("50")

    @pytest.mark.parametrize("amount", [0, "0", -10, "-0.01", "", None, "abc"])
    def test_zero_or_negative_clears_everything(self, jan_obligations, amount):
        result = allocate(amount, jan_obligations)

        assert all(v == Decimal("0") for v in result.allocations.values())
        assert set(result.allocations) == {"BILL-001", "BILL-002", "BILL-003"}
        assert result.excess == Decimal("0")
        assert result.total_amount == Decimal("0")

    def test_allocations_keep_supplied_order(self, jan_obligations):
        result = allocate(10, jan_obligations)
        assert list(result.allocations) == ["BILL-003", "BILL-001", "BILL-002"]

    def test_exact_payment(self, jan_obligations):
        result = allocate("350.00", jan_obligations)
        assert result.excess == Decimal("0")
        assert result.allocated_total == Decimal("350")
        assert result.allocated_count == 3

    def test_no_obligations_everything_is_excess(self):
        result = allocate(75, [])
        assert result.allocations == {}
        assert result.excess == Decimal("75")

    def test_same_day_ties_keep_supplied_order(self):
        obligations = [
            Obligation(id="B", date="2025-02-01", balance=30),
            Obligation(id="A", date="2025-02-01", balance=30),
            Obligation(id="C", date="2025-01-15", balance=30),
        ]
        result = allocate(50, obligations)
        assert _amounts(result) == {"B": Decimal("20"), "A": Decimal("0"), "C": Decimal("30")}

    def test_undated_obligations_go_last(self):
        obligations = [
            {"id": "X", "date": None, "balance": 40},
            {"id": "Y", "date": "garbage", "balance": 40},
            {"id": "Z", "date": "2025-03-01T00:00:00.000Z", "balance": 40},
        ]
        result = allocate(60, obligations)
        assert _amounts(result) == {"X": Decimal("20"), "Y": Decimal("0"), "Z": Decimal("40")}

    def test_non_positive_balances_receive_nothing(self):
        obligations = [
            {"id": "paid", "date": "2025-01-01", "balance": 0},
            {"id": "odd", "date": "2025-01-02", "balance": -20},
            {"id": "open", "date": "2025-01-03", "balance": 10},
        ]
        result = allocate(25, obligations)
        assert _amounts(result) == {"paid": Decimal("0"), "odd": Decimal("0"), "open": Decimal("10")}
        assert result.excess == Decimal("15")

    def test_duplicate_ids_first_wins(self, caplog):
        obligations = [
            {"id": "INV-1", "date": "2025-01-01", "balance": 10},
            {"id": "INV-1", "date": "2024-12-01", "balance": 999},
        ]
        with caplog.at_level(logging.WARNING, logger="payment_allocation"):
            result = allocate(30, obligations)
        assert _amounts(result) == {"INV-1": Decimal("10")}
        assert result.excess == Decimal("20")
        assert "Duplicate obligation id" in caplog.text

    def test_camel_case_records_from_query_service(self):
        result = allocate(
            "1,500",
            [{"id": 17, "date": "2025-04-01", "balance": "1000.50", "number": "INV-017"}],
        )
        assert _amounts(result) == {"17": Decimal("1000.50")}
        assert result.excess == Decimal("499.50")

    def test_recomputed_on_every_call(self, jan_obligations):
        first = allocate(400, jan_obligations)
        second = allocate(120, jan_obligations)
        assert _amounts(second) == {
            "BILL-003": Decimal("0"),
            "BILL-001": Decimal("100"),
            "BILL-002": Decimal("20"),
        }
        assert first.excess == Decimal("50")
        assert second.excess == Decimal("0")

    def test_idempotent(self, jan_obligations):
        assert allocate(275, jan_obligations) == allocate(275, jan_obligations)
        assert allocate(275, jan_obligations).to_dict() == allocate(275, jan_obligations).to_dict()

    def test_numeric_document_numbers(self):
        result = allocate(100, [{"id": "B1", "date": "2025-01-01", "balance": 50, "number": 1001}])
        assert result.allocations == {"B1": Decimal("50")}
        assert result.excess == Decimal("50")
        assert Obligation(id=7, number=1001).number == "1001"

    def test_malformed_entries_are_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="payment_allocation"):
            result = allocate(
                100,
                [{"id": "B1", "date": "2025-01-01", "balance": 60}, "junk", 3.5, None],
            )
        assert result.allocations == {"B1": Decimal("60")}
        assert result.excess == Decimal("40")
        assert "junk" in caplog.text


# ---------------------------------------------------------------------------
# 2. Manual override
# ---------------------------------------------------------------------------
class TestManualAllocation:

    def test_keeps_typed_amounts_without_sweep(self, jan_obligations):
        result = allocate(300, jan_obligations, manual_amounts={"BILL-002": 120})

        assert result.mode == MANUAL
        assert _amounts(result) == {
            "BILL-003": Decimal("0"),
            "BILL-001": Decimal("0"),
            "BILL-002": Decimal("120"),
        }
        assert result.excess == Decimal("180")

    def test_amount_above_balance_is_clamped(self, jan_obligations):
        result = allocate(500, jan_obligations, manual_amounts={"BILL-003": 80, "BILL-001": "-5"})
        assert result.allocations["BILL-003"] == Decimal("50")
        assert result.allocations["BILL-001"] == Decimal("0")
        assert result.excess == Decimal("450")

    def test_sum_above_amount_received_is_trimmed_oldest_first(self, jan_obligations, caplog):
        with caplog.at_level(logging.WARNING, logger="payment_allocation"):
            result = allocate(
                150, jan_obligations,
                manual_amounts={"BILL-001": 100, "BILL-002": 100, "BILL-003": 50},
            )
        assert _amounts(result) == {
            "BILL-003": Decimal("0"),
            "BILL-001": Decimal("100"),
            "BILL-002": Decimal("50"),
        }
        assert result.excess == Decimal("0")
        assert "trimmed" in caplog.text

    def test_unknown_ids_ignored(self, jan_obligations, caplog):
        with caplog.at_level(logging.WARNING, logger="payment_allocation"):
            result = allocate(100, jan_obligations, manual_amounts={"BILL-999": 60, "BILL-001": 40})
        assert "BILL-999" not in result.allocations
        assert result.allocations["BILL-001"] == Decimal("40")
        assert result.excess == Decimal("60")
        assert "BILL-999" in caplog.text

    def test_non_positive_amount_clears_manual_entries(self, jan_obligations):
        result = allocate(0, jan_obligations, manual_amounts={"BILL-001": 100})
        assert result.allocated_total == Decimal("0")
        assert result.excess == Decimal("0")


# ---------------------------------------------------------------------------
# 3. Conservation across amounts
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("amount", ["0", "0.01", "99.99", "100", "100.01", "300", "350", "350.01", "10000"])
def test_conservation_and_date_order(jan_obligations, amount):
    total = Decimal(amount)
    result = allocate(total, jan_obligations)
    by_id = {ob.id: ob for ob in jan_obligations}

    assert result.allocated_total + result.excess == total
    assert result.excess >= Decimal("0")
    for oid, allocated in result.allocations.items():
        assert Decimal("0") <= allocated <= by_id[oid].balance

    # an obligation only receives funds once every older one is settled
    ordered = sorted(jan_obligations, key=lambda ob: ob.date)
    for older, newer in zip(ordered, ordered[1:]):
        if result.allocations[newer.id] > 0:
            assert result.allocations[older.id] == older.balance


@pytest.mark.parametrize("amount", ["10", "260", "1000"])
def test_manual_conservation(jan_obligations, amount):
    total = Decimal(amount)
    result = allocate(total, jan_obligations, manual_amounts={"BILL-001": 90, "BILL-002": 500, "BILL-003": 10})
    assert result.allocated_total + result.excess == total
    assert result.excess >= Decimal("0")


# ---------------------------------------------------------------------------
# 4. Summary panel and payload
# ---------------------------------------------------------------------------
def test_summarize_payment(jan_obligations):
    result = allocate(400, jan_obligations)
    summary = summarize_payment(jan_obligations, result)

    assert summary.total_outstanding == Decimal("350")
    assert summary.amount_received == Decimal("400")
    assert summary.amount_used == Decimal("350")
    assert summary.amount_in_excess == Decimal("50")
    assert summary.allocated_count == 3
    assert summary.to_dict()["amountInExcess"] == 50.0


def test_to_dict(jan_obligations):
    payload = allocate(250, jan_obligations).to_dict()
    assert payload == {
        "allocations": {"BILL-003": 0.0, "BILL-001": 100.0, "BILL-002": 150.0},
        "excess": 0.0,
        "totalAmount": 250.0,
        "mode": "auto",
    }
