# books_engine/domain/services/document_totals.py
"""
Document totals for bills, purchase orders, vendor credits, invoices, etc.

    sub_total    = Σ base (document discount) or Σ taxable (line discount)
    discount     = document-level discount on sub_total
    tax_total    = Σ line tax
    total        = sub_total - discount + tax_total + adjustment + TCS (+ shipping)
    balance_due  = total - TDS

TCS and TDS stay separate fields: TCS is collected on top of the document,
TDS is withheld from what is actually paid out. The result is always a full
re-derivation from the draft; nothing is patched incrementally.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping

from books_engine.config.settings import settings
from books_engine.domain.models.documents import DocumentDraft, LineItem, Totals
from books_engine.domain.models.tax_rate_config import WithholdingTable
from books_engine.domain.services.amounts import HUNDRED, ZERO, non_negative
from books_engine.domain.services.document_policy import (
    ORG_IS_DESTINATION,
    DocumentPolicy,
    get_policy,
)
from books_engine.domain.services.line_calculator import (
    TaxRateLookup,
    compute_lines,
    discount_for,
)
from books_engine.domain.services.tax_rate_defaults import (
    default_tax_rates,
    default_withholding_sections,
)
from books_engine.domain.services.tax_split import is_intra_state, split_tax

logger = logging.getLogger("document_totals")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compute_totals(
    document: DocumentDraft | Mapping[str, Any],
    tax_rates: TaxRateLookup | None = None,
    policy: DocumentPolicy | str | None = None,
    withholding: WithholdingTable | None = None,
    organization_state: str | None = None,
) -> Totals:
    """
    Compute every total shown in a document's summary panel.

    ``organization_state`` fills in the organization's side of the place of
    supply (destination on purchase documents, source on sales documents)
    when the draft leaves it blank; it defaults to ``settings.ORGANIZATION_STATE``.
    """
    policy = get_policy(policy or settings.DEFAULT_DOCUMENT_POLICY)
    if isinstance(document, DocumentDraft):
        doc = document
    else:
        doc = DocumentDraft.model_validate(document if isinstance(document, Mapping) else {})
    if tax_rates is None:
        tax_rates = default_tax_rates()

    advisories: list[str] = []

    # -------------------------------------------------------------------
    # 1. Lines
    # -------------------------------------------------------------------
    lines = compute_lines(doc.lines, tax_rates, apply_discount=policy.applies_line_discount)
    advisories.extend(_unrecognized_tax_codes(lines))

    # -------------------------------------------------------------------
    # 2. Sub total + document discount
    # -------------------------------------------------------------------
    if policy.applies_line_discount:
        sub_total = sum((line.taxable_amount for line in lines), ZERO)
    else:
        sub_total = sum((line.base_amount for line in lines), ZERO)

    if policy.applies_document_discount:
        discount_amount = discount_for(sub_total, doc.discount_value, doc.discount_type)
    else:
        discount_amount = ZERO
        if doc.discount_value:
            logger.debug("Document discount ignored for %s (discounts are per line)", policy.name)

    # -------------------------------------------------------------------
    # 3. Tax
    # -------------------------------------------------------------------
    tax_total = sum((line.tax_amount for line in lines), ZERO)
    source_state, destination_state = _resolve_states(doc, policy, organization_state)
    gst_split = split_tax(lines, source_state, destination_state)

    # -------------------------------------------------------------------
    # 4. After-tax charges
    # -------------------------------------------------------------------
    withholding_base = sub_total - discount_amount
    if withholding is None and (doc.tds_section or doc.tcs_section):
        withholding = default_withholding_sections()

    tcs_amount = ZERO
    if policy.allows_tcs:
        tcs_amount = _withholding_amount(
            "TCS", doc.tcs_section, doc.tcs_amount, withholding_base, withholding, advisories,
        )
    tds_amount = ZERO
    if policy.allows_tds:
        tds_amount = _withholding_amount(
            "TDS", doc.tds_section, doc.tds_amount, withholding_base, withholding, advisories,
        )

    shipping_charges = non_negative(doc.shipping_charges) if policy.allows_shipping else ZERO
    adjustment = doc.adjustment

    # -------------------------------------------------------------------
    # 5. Total and balance due
    # -------------------------------------------------------------------
    total = sub_total - discount_amount + tax_total + adjustment + tcs_amount + shipping_charges
    balance_due = total - tds_amount

    logger.debug(
        "Totals (%s): sub_total=%s discount=%s tax=%s tcs=%s tds=%s total=%s balance_due=%s",
        policy.name, sub_total, discount_amount, tax_total, tcs_amount, tds_amount, total, balance_due,
    )

    return Totals(
        policy=policy.name,
        lines=lines,
        sub_total=sub_total,
        discount_amount=discount_amount,
        tax_total=tax_total,
        gst_split=gst_split,
        shipping_charges=shipping_charges,
        adjustment=adjustment,
        tcs_amount=tcs_amount,
        tds_amount=tds_amount,
        total=total,
        balance_due=balance_due,
        is_intra_state=is_intra_state(source_state, destination_state),
        advisories=advisories,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _unrecognized_tax_codes(lines: list[LineItem]) -> list[str]:
    flags: list[str] = []
    seen: set[str] = set()
    for line in lines:
        if line.tax_code_recognized or line.tax_code in seen:
            continue
        seen.add(line.tax_code)
        flags.append(f"UNRECOGNIZED_TAX_CODE:{line.tax_code}")
    return flags


def _resolve_states(
    doc: DocumentDraft,
    policy: DocumentPolicy,
    organization_state: str | None,
) -> tuple[str | None, str | None]:
    org_state = settings.ORGANIZATION_STATE if organization_state is None else organization_state
    source_state, destination_state = doc.source_state, doc.destination_state
    if policy.organization_side == ORG_IS_DESTINATION:
        destination_state = destination_state or org_state
    else:
        source_state = source_state or org_state
    return source_state, destination_state


def _withholding_amount(
    kind: str,
    section_code: str | None,
    explicit_amount: Decimal,
    base: Decimal,
    table: WithholdingTable | None,
    advisories: list[str],
) -> Decimal:
    """Section rate on the discounted sub total when a known section is picked, else the typed amount."""
    if section_code:
        section = table.lookup(section_code, kind) if table is not None else None
        if section is not None:
            return max(ZERO, base) * section.rate / HUNDRED
        logger.warning("Unknown %s section %r, using the entered amount", kind, section_code)
        advisories.append(f"UNKNOWN_WITHHOLDING_SECTION:{section_code}")
    return non_negative(explicit_amount)
