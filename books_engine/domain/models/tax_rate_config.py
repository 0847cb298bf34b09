# books_engine/domain/models/tax_rate_config.py
"""
Domain dataclasses for tax master data.

TaxRateTable: tax code -> GST percentage, as maintained in organization settings.
WithholdingTable: TDS / TCS sections with their deduction/collection rates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from books_engine.domain.services.amounts import ZERO, to_decimal

WITHHOLDING_KINDS = ("TDS", "TCS")


@dataclass
class TaxRateTable:
    """GST rate per tax code. Unknown codes are not an error, see ``lookup``."""

    rates: dict[str, Decimal] = field(default_factory=dict)

    # Metadata
    source: str = "hardcoded"  # "hardcoded", "settings", "manual"

    def __post_init__(self) -> None:
        self.rates = {
            str(code).strip(): to_decimal(rate)
            for code, rate in self.rates.items()
            if code is not None and str(code).strip()
        }

    def __contains__(self, code: object) -> bool:
        return self.lookup(code) is not None

    def lookup(self, code: Any) -> Decimal | None:
        """Return the rate for ``code``, or None when the code is not in the table."""
        if code is None:
            return None
        return self.rates.get(str(code).strip())

    def rate_for(self, code: Any) -> Decimal:
        rate = self.lookup(code)
        return rate if rate is not None else ZERO

    # ---- serialization ----

    def to_dict(self) -> dict[str, Any]:
        return {
            "rates": {code: str(rate) for code, rate in self.rates.items()},
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaxRateTable:
        return cls(
            rates=dict(data.get("rates", {})),
            source=data.get("source", "hardcoded"),
        )

    @classmethod
    def from_records(cls, records: list[dict[str, Any]], source: str = "settings") -> TaxRateTable:
        """Build from tax master records shaped like ``{"name": "GST18", "rate": 18}``."""
        rates: dict[str, Decimal] = {}
        for rec in records:
            name = rec.get("name")
            if name is None or not str(name).strip():
                continue
            rates.setdefault(str(name).strip(), to_decimal(rec.get("rate")))
        return cls(rates=rates, source=source)


@dataclass
class WithholdingSection:
    """A single TDS or TCS section, e.g. professional fees at 10%."""

    code: str
    label: str
    rate: Decimal = ZERO
    kind: str = "TDS"

    def __post_init__(self) -> None:
        self.rate = to_decimal(self.rate)
        self.kind = (self.kind or "TDS").upper()
        if self.kind not in WITHHOLDING_KINDS:
            raise ValueError(f"Unknown withholding kind {self.kind!r}")


@dataclass
class WithholdingTable:
    """TDS / TCS sections keyed by code."""

    sections: dict[str, WithholdingSection] = field(default_factory=dict)
    source: str = "hardcoded"

    def lookup(self, code: Any, kind: str | None = None) -> WithholdingSection | None:
        if code is None:
            return None
        section = self.sections.get(str(code).strip())
        if section is None:
            return None
        if kind is not None and section.kind != kind.upper():
            return None
        return section

    def to_dict(self) -> dict[str, Any]:
        return {
            "sections": [
                {"code": s.code, "label": s.label, "rate": str(s.rate), "kind": s.kind}
                for s in self.sections.values()
            ],
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WithholdingTable:
        sections = [
            WithholdingSection(
                code=entry["code"],
                label=entry.get("label", entry["code"]),
                rate=entry.get("rate"),
                kind=entry.get("kind", "TDS"),
            )
            for entry in data.get("sections", [])
        ]
        return cls(
            sections={s.code: s for s in sections},
            source=data.get("source", "hardcoded"),
        )
