# books_engine/domain/services/document_policy.py
"""
Per-document-type calculation rules.

Every document type runs through the same totals calculation; a policy only
decides where the discount is taken, which after-tax charges apply and which
side of the transaction is the organization itself.
"""

from __future__ import annotations

from dataclasses import dataclass

DOCUMENT_SCOPE = "document"
LINE_SCOPE = "line"

# The organization buys on purchase documents and sells on sales documents.
ORG_IS_DESTINATION = "destination"
ORG_IS_SOURCE = "source"


@dataclass(frozen=True)
class DocumentPolicy:
    name: str
    discount_scope: str = DOCUMENT_SCOPE
    allows_shipping: bool = False
    allows_tds: bool = True
    allows_tcs: bool = True
    organization_side: str = ORG_IS_DESTINATION

    @property
    def applies_line_discount(self) -> bool:
        return self.discount_scope == LINE_SCOPE

    @property
    def applies_document_discount(self) -> bool:
        return self.discount_scope == DOCUMENT_SCOPE


BILL = DocumentPolicy("bill")
PURCHASE_ORDER = DocumentPolicy("purchase_order")
VENDOR_CREDIT = DocumentPolicy("vendor_credit")
INVOICE = DocumentPolicy(
    "invoice",
    discount_scope=LINE_SCOPE,
    allows_shipping=True,
    allows_tds=False,
    allows_tcs=False,
    organization_side=ORG_IS_SOURCE,
)
CREDIT_NOTE = DocumentPolicy(
    "credit_note",
    discount_scope=LINE_SCOPE,
    allows_shipping=True,
    allows_tds=False,
    organization_side=ORG_IS_SOURCE,
)
QUOTE = DocumentPolicy(
    "quote",
    discount_scope=LINE_SCOPE,
    allows_shipping=True,
    allows_tds=False,
    allows_tcs=False,
    organization_side=ORG_IS_SOURCE,
)
SALES_ORDER = DocumentPolicy(
    "sales_order",
    discount_scope=LINE_SCOPE,
    allows_shipping=True,
    allows_tds=False,
    allows_tcs=False,
    organization_side=ORG_IS_SOURCE,
)

POLICIES: dict[str, DocumentPolicy] = {
    p.name: p
    for p in (BILL, PURCHASE_ORDER, VENDOR_CREDIT, INVOICE, CREDIT_NOTE, QUOTE, SALES_ORDER)
}


def get_policy(policy: DocumentPolicy | str) -> DocumentPolicy:
    """Resolve a policy by name ("bill", "invoice", ...); policies pass through."""
    if isinstance(policy, DocumentPolicy):
        return policy
    key = str(policy).strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return POLICIES[key]
    except KeyError:
        raise ValueError(f"Document policy {policy!r} not found") from None
