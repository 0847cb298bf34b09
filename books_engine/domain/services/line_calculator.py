# books_engine/domain/services/line_calculator.py
"""
Line item calculation.

base = qty x rate, discount (percentage or flat, clamped to the base),
taxable = base - discount, tax = taxable x rate% / 100, total = taxable + tax.

Called on every keystroke in the item table, so it stays a plain function of
its inputs with no caching.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal
from typing import Any, Union

from books_engine.domain.models.documents import PERCENTAGE, LineItem, LineItemDraft
from books_engine.domain.models.tax_rate_config import TaxRateTable
from books_engine.domain.services.amounts import (
    HUNDRED,
    ZERO,
    clamp,
    non_negative,
    to_decimal,
)
from books_engine.domain.services.tax_rate_defaults import default_tax_rates

logger = logging.getLogger("line_calculator")

TaxRateLookup = Union[TaxRateTable, Mapping[str, Any], Callable[[str], Any]]


def resolve_tax_rate(tax_rates: TaxRateLookup | None, tax_code: str | None) -> tuple[Decimal, bool]:
    """
    Look up the GST % for ``tax_code``.

    Returns ``(rate, recognized)``. A missing code means "no tax" and is
    recognized; a non-empty code the table does not know resolves to 0% with
    ``recognized=False`` so the caller can raise an advisory. Without a table
    the hardcoded GST slab codes are used.
    """
    if not tax_code:
        return ZERO, True
    if tax_rates is None:
        tax_rates = default_tax_rates()

    if isinstance(tax_rates, TaxRateTable):
        raw = tax_rates.lookup(tax_code)
    elif isinstance(tax_rates, Mapping):
        raw = tax_rates.get(tax_code)
    elif callable(tax_rates):
        try:
            raw = tax_rates(tax_code)
        except (LookupError, ValueError, TypeError):
            raw = None
    else:
        raw = None

    if raw is None:
        logger.warning("Unrecognized tax code %r, using 0%%", tax_code)
        return ZERO, False

    rate = to_decimal(raw)
    if rate < ZERO:
        logger.warning("Negative rate %s for tax code %r, using 0%%", rate, tax_code)
        rate = ZERO
    return rate, True


def discount_for(base_amount: Decimal, discount: Any, discount_type: str) -> Decimal:
    """Discount amount on ``base_amount``, clamped to ``[0, base_amount]``."""
    value = to_decimal(discount)
    if discount_type == PERCENTAGE:
        amount = clamp(value, ZERO, HUNDRED) / HUNDRED * base_amount
    else:
        amount = value
    return clamp(amount, ZERO, base_amount)


def compute_line(
    item: LineItemDraft | Mapping[str, Any],
    tax_rates: TaxRateLookup | None,
    apply_discount: bool = True,
) -> LineItem:
    """Compute every derived amount of a single line item.

    ``apply_discount=False`` ignores the line's own discount; documents that
    take a single document-level discount compute their lines this way.
    """
    if isinstance(item, LineItemDraft):
        draft = item
    else:
        draft = LineItemDraft.model_validate(item if isinstance(item, Mapping) else {})

    base_amount = non_negative(draft.quantity) * non_negative(draft.rate)
    if apply_discount:
        discount_amount = discount_for(base_amount, draft.discount, draft.discount_type)
    else:
        discount_amount = ZERO
    taxable_amount = base_amount - discount_amount

    tax_rate, recognized = resolve_tax_rate(tax_rates, draft.tax_code)
    tax_amount = taxable_amount * tax_rate / HUNDRED

    return LineItem(
        quantity=draft.quantity,
        rate=draft.rate,
        discount=draft.discount,
        discount_type=draft.discount_type,
        tax_code=draft.tax_code,
        item_id=draft.item_id,
        description=draft.description,
        tax_rate=tax_rate,
        base_amount=base_amount,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        tax_amount=tax_amount,
        total=taxable_amount + tax_amount,
        tax_code_recognized=recognized,
    )


def compute_lines(
    items: Iterable[LineItemDraft | Mapping[str, Any]],
    tax_rates: TaxRateLookup | None,
    apply_discount: bool = True,
) -> list[LineItem]:
    return [compute_line(item, tax_rates, apply_discount) for item in items]
