# books_engine/domain/models/documents.py
"""
Document and line-item models.

Drafts are what the form layer sends (camelCase JSON or snake_case kwargs);
they never fail validation on half-typed numbers. LineItem and Totals are the
computed results handed back for rendering and for the persistence payload.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from books_engine.config.settings import settings
from books_engine.domain.services.amounts import ZERO, round_money, to_decimal

logger = logging.getLogger("documents")

PERCENTAGE = "percentage"
FLAT = "flat"

_PERCENTAGE_ALIASES = {"percentage", "percent", "%", "pct"}


def normalize_discount_type(val: Any) -> str:
    """Map the discount type spellings used across forms onto percentage / flat."""
    if val is None:
        return PERCENTAGE
    text = str(val).strip().lower()
    if not text or text in _PERCENTAGE_ALIASES:
        return PERCENTAGE
    return FLAT


def _places(places: Optional[int]) -> int:
    return settings.MONEY_DECIMAL_PLACES if places is None else places


def _blank_to_none(val: Any) -> Optional[str]:
    if val is None:
        return None
    text = str(val).strip()
    return text or None


class _DraftModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class LineItemDraft(_DraftModel):
    item_id: Optional[str] = None
    description: Optional[str] = None
    quantity: Decimal = Field(default=ZERO)
    rate: Decimal = Field(default=ZERO)
    discount: Decimal = Field(default=ZERO)
    discount_type: str = PERCENTAGE
    tax_code: Optional[str] = None

    @field_validator("quantity", "rate", "discount", mode="before")
    @classmethod
    def _lenient_amount(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @field_validator("discount_type", mode="before")
    @classmethod
    def _discount_type(cls, v: Any) -> str:
        return normalize_discount_type(v)

    @field_validator("item_id", "description", "tax_code", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> Optional[str]:
        return _blank_to_none(v)


class DocumentDraft(_DraftModel):
    lines: list[LineItemDraft] = Field(default_factory=list)

    # Document-level discount
    discount_type: str = PERCENTAGE
    discount_value: Decimal = Field(default=ZERO)

    # Charges applied after tax
    adjustment: Decimal = Field(default=ZERO)
    shipping_charges: Decimal = Field(default=ZERO)

    # Withholding: explicit amounts, or a section code resolved against a WithholdingTable
    tds_amount: Decimal = Field(default=ZERO)
    tcs_amount: Decimal = Field(default=ZERO)
    tds_section: Optional[str] = None
    tcs_section: Optional[str] = None

    # Place of supply
    source_state: Optional[str] = None
    destination_state: Optional[str] = None

    @field_validator(
        "discount_value", "adjustment", "shipping_charges", "tds_amount", "tcs_amount",
        mode="before",
    )
    @classmethod
    def _lenient_amount(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @field_validator("discount_type", mode="before")
    @classmethod
    def _discount_type(cls, v: Any) -> str:
        return normalize_discount_type(v)

    @field_validator("tds_section", "tcs_section", "source_state", "destination_state", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("lines", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> list:
        if not isinstance(v, (list, tuple)):
            return []
        lines = []
        for line in v:
            if isinstance(line, (LineItemDraft, Mapping)):
                lines.append(line)
            elif line is not None:
                logger.debug("Skipping malformed line item %r", line)
        return lines


@dataclass
class LineItem:
    """A line item with every derived amount filled in."""
    quantity: Decimal = ZERO
    rate: Decimal = ZERO
    discount: Decimal = ZERO
    discount_type: str = PERCENTAGE
    tax_code: Optional[str] = None
    item_id: Optional[str] = None
    description: Optional[str] = None
    # Derived
    tax_rate: Decimal = ZERO
    base_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total: Decimal = ZERO
    tax_code_recognized: bool = True

    def to_dict(self, places: Optional[int] = None) -> dict:
        places = _places(places)
        return {
            "itemId": self.item_id,
            "description": self.description,
            "quantity": float(self.quantity),
            "rate": float(self.rate),
            "discount": float(self.discount),
            "discountType": self.discount_type,
            "taxCode": self.tax_code,
            "taxRate": float(self.tax_rate),
            "baseAmount": float(round_money(self.base_amount, places)),
            "discountAmount": float(round_money(self.discount_amount, places)),
            "taxableAmount": float(round_money(self.taxable_amount, places)),
            "taxAmount": float(round_money(self.tax_amount, places)),
            "total": float(round_money(self.total, places)),
        }


@dataclass
class Totals:
    """Result of aggregating a document's lines and document-level charges."""
    policy: str = ""
    lines: list[LineItem] = field(default_factory=list)
    sub_total: Decimal = ZERO
    discount_amount: Decimal = ZERO
    tax_total: Decimal = ZERO
    # label -> amount, first-seen order (CGST9, SGST9, IGST18, ...)
    gst_split: dict[str, Decimal] = field(default_factory=dict)
    shipping_charges: Decimal = ZERO
    adjustment: Decimal = ZERO
    tcs_amount: Decimal = ZERO
    tds_amount: Decimal = ZERO
    total: Decimal = ZERO
    balance_due: Decimal = ZERO
    is_intra_state: bool = True
    advisories: list[str] = field(default_factory=list)

    def to_dict(self, places: Optional[int] = None) -> dict:
        places = _places(places)

        def _m(val: Decimal) -> float:
            return float(round_money(val, places))

        return {
            "policy": self.policy,
            "items": [line.to_dict(places) for line in self.lines],
            "subTotal": _m(self.sub_total),
            "discountAmount": _m(self.discount_amount),
            "taxTotal": _m(self.tax_total),
            "gstSplit": {label: _m(amount) for label, amount in self.gst_split.items()},
            "shippingCharges": _m(self.shipping_charges),
            "adjustment": _m(self.adjustment),
            "tcsAmount": _m(self.tcs_amount),
            "tdsAmount": _m(self.tds_amount),
            "total": _m(self.total),
            "balanceDue": _m(self.balance_due),
            "isIntraState": self.is_intra_state,
            "advisories": list(self.advisories),
        }
