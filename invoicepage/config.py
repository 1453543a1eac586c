from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from invoicepage.env import load_env

logger = logging.getLogger(__name__)

_QR_LEVELS = ("L", "M", "Q", "H")


@dataclass(frozen=True)
class Settings:
    export_page_capacity: int = 20
    payment_tax_rate: Decimal = Decimal("0.19")
    payment_currency: str = "EUR"
    payment_reference: str = "Rechnung"
    due_days: int = 30
    qr_size: int = 120
    qr_border: int = 1
    qr_level: str = "M"


def _env_int(name: str, default: int, *, minimum: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("config.invalid_int", extra={"variable": name, "value": raw})
        return default
    if value < minimum:
        logger.warning("config.out_of_range", extra={"variable": name, "value": raw})
        return default
    return value


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = Decimal(raw.replace(",", "."))
    except InvalidOperation:
        logger.warning("config.invalid_decimal", extra={"variable": name, "value": raw})
        return default
    if not value.is_finite() or value < 0:
        logger.warning("config.out_of_range", extra={"variable": name, "value": raw})
        return default
    # "19" means 19 %, keep the fraction form used by the payment amount
    if value > 1:
        value = value / Decimal("100")
    return value


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


def load_settings() -> Settings:
    load_env()
    defaults = Settings()

    qr_level = _env_str("INVOICE_QR_LEVEL", defaults.qr_level).upper()
    if qr_level not in _QR_LEVELS:
        logger.warning("config.invalid_qr_level", extra={"value": qr_level})
        qr_level = defaults.qr_level

    return Settings(
        export_page_capacity=_env_int(
            "INVOICE_EXPORT_PAGE_CAPACITY", defaults.export_page_capacity, minimum=1
        ),
        payment_tax_rate=_env_decimal("INVOICE_PAYMENT_TAX_RATE", defaults.payment_tax_rate),
        payment_currency=_env_str("INVOICE_PAYMENT_CURRENCY", defaults.payment_currency),
        payment_reference=_env_str("INVOICE_PAYMENT_REFERENCE", defaults.payment_reference),
        due_days=_env_int("INVOICE_DUE_DAYS", defaults.due_days, minimum=0),
        qr_size=_env_int("INVOICE_QR_SIZE", defaults.qr_size, minimum=21),
        qr_border=_env_int("INVOICE_QR_BORDER", defaults.qr_border, minimum=0),
        qr_level=qr_level,
    )
