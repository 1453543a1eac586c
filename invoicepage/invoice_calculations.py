from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, getcontext, localcontext
from typing import Any, Iterable, Iterator

from invoicepage.decimal_field import parse_decimal
from invoicepage.models import LineItem, Page
from invoicepage.tax_label import extract_rate_percent, tax_amount


_DECIMAL_PLACES = Decimal("0.01")
_ZERO = Decimal("0")
# Operands are capped at 28 integer digits, so products and sums stay well below this.
_WORKING_PRECISION = 80


def amount_context():
    """Decimal context wide enough for sums and products of parsed fields."""
    context = getcontext().copy()
    context.prec = _WORKING_PRECISION
    return localcontext(context)


def quantize_amount(value: Decimal) -> Decimal:
    """Round half away from zero to cents."""
    with localcontext() as ctx:
        # quantize needs every integer digit plus the two cents within precision
        ctx.prec = max(_WORKING_PRECISION, value.adjusted() + 3)
        rounded = value.quantize(_DECIMAL_PLACES, rounding=ROUND_HALF_UP)
    if not rounded:
        # no "-0,00" on screen
        return abs(rounded)
    return rounded


def format_amount(value: Decimal) -> str:
    return f"{quantize_amount(value):.2f}".replace(".", ",")


def line_amount(quantity: Any, rate: Any) -> Decimal:
    quantity_number = parse_decimal(quantity)
    rate_number = parse_decimal(rate)
    if quantity_number and rate_number:
        with amount_context():
            return quantity_number * rate_number
    return _ZERO


def flatten_line_items(pages: Iterable[Page]) -> Iterator[LineItem]:
    for page in pages:
        yield from page


def subtotal(pages: Iterable[Page]) -> Decimal:
    # Full precision; rounding happens once, at display.
    total = _ZERO
    with amount_context():
        for item in flatten_line_items(pages):
            total += line_amount(item.quantity, item.rate)
    return total

@dataclass(frozen=True)
class InvoiceTotals:
    raw_subtotal: Decimal
    tax_rate: Decimal
    subtotal: Decimal
    tax: Decimal
    total: Decimal

    def display(self) -> dict[str, str]:
        return {
            "subtotal": format_amount(self.subtotal),
            "tax": format_amount(self.tax),
            "total": format_amount(self.total),
        }


def calculate_invoice_totals(pages: Iterable[Page], tax_label: str | None) -> InvoiceTotals:
    raw_subtotal = subtotal(pages)
    rate = extract_rate_percent(tax_label)
    with amount_context():
        subtotal_q = quantize_amount(raw_subtotal)
        tax_q = quantize_amount(tax_amount(raw_subtotal, rate))
        total = subtotal_q + tax_q

    return InvoiceTotals(
        raw_subtotal=raw_subtotal,
        tax_rate=rate,
        subtotal=subtotal_q,
        tax=tax_q,
        total=total,
    )
