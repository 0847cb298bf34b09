# books_engine/domain/services/tax_split.py
"""
GST split by place of supply.

Intra-state supply (source state == destination state) splits each line's
tax equally into CGST and SGST at half the rate; inter-state supply carries
the whole tax as IGST. Buckets are labelled by head and rate (CGST9, SGST9,
IGST18) and keep the order in which they were first seen.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from books_engine.domain.models.documents import LineItem
from books_engine.domain.services.amounts import TWO, ZERO, format_rate

logger = logging.getLogger("tax_split")

CGST = "CGST"
SGST = "SGST"
IGST = "IGST"


def normalize_state(state: str | None) -> str:
    return (state or "").strip().casefold()


def is_intra_state(source_state: str | None, destination_state: str | None) -> bool:
    """Exact match after trimming and case-folding. No partial / substring matching."""
    return normalize_state(source_state) == normalize_state(destination_state)


def split_tax(
    lines: Iterable[LineItem],
    source_state: str | None,
    destination_state: str | None,
) -> dict[str, Decimal]:
    """Aggregate line taxes into CGST/SGST or IGST buckets keyed by label."""
    intra = is_intra_state(source_state, destination_state)
    split: dict[str, Decimal] = {}

    for line in lines:
        rate = line.tax_rate
        if rate <= ZERO:
            continue
        if intra:
            half_rate = format_rate(rate / TWO)
            half_amount = line.tax_amount / TWO
            for head in (CGST, SGST):
                label = f"{head}{half_rate}"
                split[label] = split.get(label, ZERO) + half_amount
        else:
            label = f"{IGST}{format_rate(rate)}"
            split[label] = split.get(label, ZERO) + line.tax_amount

    logger.debug(
        "GST split (%s): %s",
        "intra-state" if intra else "inter-state",
        {label: str(amount) for label, amount in split.items()},
    )
    return split


def tax_heads(split: dict[str, Decimal]) -> dict[str, Decimal]:
    """Collapse a split into per-head totals: {"cgst": .., "sgst": .., "igst": ..}."""
    heads = {"cgst": ZERO, "sgst": ZERO, "igst": ZERO}
    for label, amount in split.items():
        for head in (CGST, SGST, IGST):
            if label.startswith(head):
                heads[head.lower()] += amount
                break
    return heads
