# books_engine/domain/services/tax_rate_defaults.py
"""
Hardcoded tax master data fallback.

Used when the caller has no organization-specific tax table at hand, e.g. in
tests or while the settings service is still loading.
"""

from __future__ import annotations

from decimal import Decimal

from books_engine.domain.models.tax_rate_config import (
    TaxRateTable,
    WithholdingSection,
    WithholdingTable,
)

_GST_SLABS = ("0.25", "3", "5", "12", "18", "28")


def default_tax_rates() -> TaxRateTable:
    """Return the standard GST slab codes (GST5, IGST18, ...) plus the zero-rated codes."""
    rates: dict[str, Decimal] = {
        "none": Decimal("0"),
        "exempt": Decimal("0"),
        "nil": Decimal("0"),
        "non_gst": Decimal("0"),
        "GST0": Decimal("0"),
    }
    for slab in _GST_SLABS:
        rates[f"GST{slab}"] = Decimal(slab)
        rates[f"IGST{slab}"] = Decimal(slab)
    return TaxRateTable(rates=rates, source="hardcoded")


def default_withholding_sections() -> WithholdingTable:
    """Return the common TDS / TCS sections offered on purchase documents."""
    sections = [
        WithholdingSection("commission_brokerage_2", "Commission or Brokerage [2%]", Decimal("2"), "TDS"),
        WithholdingSection("professional_fees_10", "Professional Fees [10%]", Decimal("10"), "TDS"),
        WithholdingSection("rent_10", "Rent [10%]", Decimal("10"), "TDS"),
        WithholdingSection("contractor_1", "Payment to Contractor [1%]", Decimal("1"), "TDS"),
        WithholdingSection("contractor_2", "Payment to Contractor [2%]", Decimal("2"), "TDS"),
        WithholdingSection("sale_of_goods_0_1", "Sale of Goods [0.1%]", Decimal("0.1"), "TCS"),
        WithholdingSection("scrap_1", "Scrap [1%]", Decimal("1"), "TCS"),
        WithholdingSection("motor_vehicle_1", "Motor Vehicle [1%]", Decimal("1"), "TCS"),
    ]
    return WithholdingTable(sections={s.code: s for s in sections}, source="hardcoded")
