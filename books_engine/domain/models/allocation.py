# books_engine/domain/models/allocation.py
"""Obligations (unpaid bills / invoices) and the result of spreading a payment across them."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from books_engine.config.settings import settings
from books_engine.domain.services.amounts import ZERO, parse_date, round_money, to_decimal

AUTO = "auto"
MANUAL = "manual"


def _places(places: Optional[int]) -> int:
    return settings.MONEY_DECIMAL_PLACES if places is None else places


class Obligation(BaseModel):
    """Snapshot of one unpaid or partially paid bill / invoice."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str = ""
    date: Optional[dt.date] = None
    balance: Decimal = Field(default=ZERO)
    number: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("number", mode="before")
    @classmethod
    def _number(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[dt.date]:
        return parse_date(v)

    @field_validator("balance", mode="before")
    @classmethod
    def _balance(cls, v: Any) -> Decimal:
        return to_decimal(v)


@dataclass
class AllocationResult:
    """Per-obligation allocation plus the unallocated excess."""
    # obligation id -> allocated amount, in the order obligations were supplied
    allocations: dict[str, Decimal] = field(default_factory=dict)
    excess: Decimal = ZERO
    total_amount: Decimal = ZERO
    mode: str = AUTO

    @property
    def allocated_total(self) -> Decimal:
        return sum(self.allocations.values(), ZERO)

    @property
    def allocated_count(self) -> int:
        return sum(1 for amount in self.allocations.values() if amount > ZERO)

    def to_dict(self, places: Optional[int] = None) -> dict:
        places = _places(places)
        return {
            "allocations": {
                oid: float(round_money(amount, places))
                for oid, amount in self.allocations.items()
            },
            "excess": float(round_money(self.excess, places)),
            "totalAmount": float(round_money(self.total_amount, places)),
            "mode": self.mode,
        }


@dataclass
class PaymentSummary:
    """Summary panel shown next to the allocation table."""
    total_outstanding: Decimal = ZERO
    amount_received: Decimal = ZERO
    amount_used: Decimal = ZERO
    amount_in_excess: Decimal = ZERO
    allocated_count: int = 0

    def to_dict(self, places: Optional[int] = None) -> dict:
        places = _places(places)
        return {
            "totalOutstanding": float(round_money(self.total_outstanding, places)),
            "amountReceived": float(round_money(self.amount_received, places)),
            "amountUsed": float(round_money(self.amount_used, places)),
            "amountInExcess": float(round_money(self.amount_in_excess, places)),
            "allocatedCount": self.allocated_count,
        }
