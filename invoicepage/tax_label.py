from __future__ import annotations

import logging
import re
from decimal import Decimal

from invoicepage.errors import MalformedTaxLabel

logger = logging.getLogger(__name__)

_RATE_PATTERN = re.compile(r"(\d+)%")


def _parse_rate(label: str) -> Decimal:
    match = _RATE_PATTERN.search(label)
    if not match:
        raise MalformedTaxLabel(f"no percentage in {label!r}")
    return Decimal(match.group(1))


def extract_rate_percent(label: str | None) -> Decimal:
    """Rate of the first "<digits>%" token, e.g. "MwSt. 19%" -> 19; 0 without one."""
    try:
        return _parse_rate(label or "")
    except MalformedTaxLabel:
        logger.debug("tax_label.no_rate", extra={"label": (label or "")[:60]})
        return Decimal("0")


def tax_amount(subtotal: Decimal, rate_percent: Decimal) -> Decimal:
    if not subtotal or not rate_percent:
        return Decimal("0")
    return subtotal * rate_percent / Decimal("100")
