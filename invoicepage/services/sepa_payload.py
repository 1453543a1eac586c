"""EPC ("BCD") payload for SEPA credit-transfer QR codes.

Banking apps read the payload by line position, so the eleven lines below are
a fixed contract: service tag, version, character set, identification, BIC,
name, IBAN, amount, purpose, structured reference and unstructured reference.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from invoicepage.config import Settings
from invoicepage.errors import MissingBankingDetails
from invoicepage.invoice_calculations import amount_context, quantize_amount
from invoicepage.models import Invoice

logger = logging.getLogger(__name__)

SERVICE_TAG = "BCD"
VERSION = "002"
CHARACTER_SET = "1"  # UTF-8
IDENTIFICATION = "SCT"
DEFAULT_REFERENCE = "Rechnung"

_LINE_BREAKS = re.compile(r"[\r\n]+")


def _single_line(value: Any) -> str:
    return _LINE_BREAKS.sub(" ", "" if value is None else str(value))


def _amount_text(total_amount: Any) -> str:
    try:
        amount = Decimal(str(total_amount))
    except InvalidOperation:
        amount = Decimal("0")
    if not amount.is_finite():
        amount = Decimal("0")
    return f"{quantize_amount(amount):.2f}"


def payment_amount(subtotal: Decimal, fixed_tax_rate: Decimal) -> Decimal:
    """Settlement amount: subtotal plus the fixed payment tax rate (0.19 = 19 %)."""
    with amount_context():
        return quantize_amount(subtotal + subtotal * fixed_tax_rate)


def build_payload(
    bic: str,
    recipient_name: str,
    iban: str,
    total_amount: Any,
    currency_symbol: str,
    reference: str,
    *,
    secondary_name: str = "",
    default_reference: str = DEFAULT_REFERENCE,
) -> str:
    name = recipient_name or secondary_name or ""
    lines = [
        SERVICE_TAG,
        VERSION,
        CHARACTER_SET,
        IDENTIFICATION,
        _single_line(bic),
        _single_line(name),
        _single_line(iban),
        f"{_single_line(currency_symbol)}{_amount_text(total_amount)}",
        "",  # purpose
        "",  # structured reference
        _single_line(reference or default_reference),
    ]
    return "\n".join(lines)


def has_banking_details(iban: str | None, bic: str | None) -> bool:
    return bool((iban or "").strip()) and bool((bic or "").strip())


def _require_banking_details(invoice: Invoice) -> None:
    if not has_banking_details(invoice.iban, invoice.bic):
        raise MissingBankingDetails("IBAN and BIC are both required for a payment code")


def payload_for_invoice(invoice: Invoice, subtotal: Decimal, settings: Settings) -> str | None:
    """Payload for the invoice, or None while IBAN or BIC is still empty."""
    try:
        _require_banking_details(invoice)
    except MissingBankingDetails:
        logger.debug("sepa_payload.skipped_missing_bank_details")
        return None

    return build_payload(
        bic=invoice.bic,
        recipient_name=invoice.name,
        iban=invoice.iban,
        total_amount=payment_amount(subtotal, settings.payment_tax_rate),
        currency_symbol=settings.payment_currency,
        reference=invoice.invoice_title,
        secondary_name=invoice.company_name,
        default_reference=settings.payment_reference,
    )
