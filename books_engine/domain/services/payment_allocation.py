# books_engine/domain/services/payment_allocation.py
"""
Spread one received / paid amount across outstanding bills or invoices.

Auto mode pays the oldest obligation first and moves on once it is settled;
whatever is left after every obligation is settled is excess (unused credit).
Manual mode keeps the amounts the user typed into the allocation table,
clamped to each obligation's balance and to the amount received.

Each call recomputes from scratch. Bad input never raises: a zero or negative
amount clears every allocation.
"""

from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import Any, Iterable, Mapping

from books_engine.domain.models.allocation import (
    AUTO,
    MANUAL,
    AllocationResult,
    Obligation,
    PaymentSummary,
)
from books_engine.domain.services.amounts import ZERO, clamp, non_negative, to_decimal

logger = logging.getLogger("payment_allocation")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def allocate(
    total_amount: Any,
    obligations: Iterable[Obligation | Mapping[str, Any]],
    manual_amounts: Mapping[str, Any] | None = None,
) -> AllocationResult:
    """
    Allocate ``total_amount`` across ``obligations``.

    Without ``manual_amounts`` this is the oldest-first greedy sweep: order
    by issue date (ties keep the order they were supplied in, undated
    obligations go last), give each one ``min(remaining, balance)`` until the
    money runs out.

    With ``manual_amounts`` (obligation id -> amount typed by the user) no
    sweep runs; see ``_apply_manual``.
    """
    amount = to_decimal(total_amount)
    items = _unique(obligations)
    mode = AUTO if manual_amounts is None else MANUAL

    result = AllocationResult(
        allocations={ob.id: ZERO for ob in items},
        total_amount=max(ZERO, amount),
        mode=mode,
    )
    if amount <= ZERO:
        return result

    ordered = _oldest_first(items)
    if manual_amounts is None:
        remaining = _sweep(amount, ordered, result.allocations)
    else:
        remaining = _apply_manual(amount, ordered, manual_amounts, result.allocations)

    result.excess = remaining
    logger.debug(
        "Allocated %s of %s across %d obligation(s) (%s), excess=%s",
        amount - remaining, amount, result.allocated_count, mode, remaining,
    )
    return result


def summarize_payment(
    obligations: Iterable[Obligation | Mapping[str, Any]],
    result: AllocationResult,
) -> PaymentSummary:
    """High-level summary: outstanding, received, used, excess."""
    items = _unique(obligations)
    return PaymentSummary(
        total_outstanding=sum((non_negative(ob.balance) for ob in items), ZERO),
        amount_received=result.total_amount,
        amount_used=result.allocated_total,
        amount_in_excess=result.excess,
        allocated_count=result.allocated_count,
    )


# ---------------------------------------------------------------------------
# Allocation modes
# ---------------------------------------------------------------------------

def _sweep(amount: Decimal, ordered: list[Obligation], allocations: dict[str, Decimal]) -> Decimal:
    remaining = amount
    for ob in ordered:
        if remaining <= ZERO:
            break
        take = max(ZERO, min(remaining, ob.balance))
        allocations[ob.id] = take
        remaining -= take
    return remaining


def _apply_manual(
    amount: Decimal,
    ordered: list[Obligation],
    manual_amounts: Mapping[str, Any],
    allocations: dict[str, Decimal],
) -> Decimal:
    """
    Keep the user's amounts, each clamped to ``[0, balance]``.

    If they add up to more than the amount received, later obligations (in
    date order) are cut back until the sum fits, so the excess is never
    negative.
    """
    known = {ob.id for ob in ordered}
    unknown = [str(oid) for oid in manual_amounts if str(oid) not in known]
    if unknown:
        logger.warning("Ignoring manual allocation for unknown obligation(s): %s", unknown)

    requested = {str(oid): val for oid, val in manual_amounts.items()}
    remaining = amount
    for ob in ordered:
        if ob.id not in requested:
            continue
        wanted = clamp(to_decimal(requested[ob.id]), ZERO, max(ZERO, ob.balance))
        take = min(wanted, remaining)
        if take < wanted:
            logger.warning(
                "Manual allocation for %s trimmed from %s to %s (amount received exhausted)",
                ob.id, wanted, take,
            )
        allocations[ob.id] = take
        remaining -= take
    return remaining


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _unique(obligations: Iterable[Obligation | Mapping[str, Any]] | None) -> list[Obligation]:
    """Validate obligations and drop repeated ids (first occurrence wins)."""
    items: list[Obligation] = []
    seen: set[str] = set()
    for raw in obligations or []:
        if not isinstance(raw, (Obligation, Mapping)):
            if raw is not None:
                logger.warning("Skipping malformed obligation %r", raw)
            continue
        ob = raw if isinstance(raw, Obligation) else Obligation.model_validate(raw)
        if ob.id in seen:
            logger.warning("Duplicate obligation id %r ignored", ob.id)
            continue
        seen.add(ob.id)
        items.append(ob)
    return items


def _oldest_first(items: list[Obligation]) -> list[Obligation]:
    # sorted() is stable: same-day obligations keep their supplied order
    return sorted(items, key=lambda ob: (ob.date is None, ob.date or dt.date.min))
