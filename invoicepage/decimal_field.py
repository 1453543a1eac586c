from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, NamedTuple

from invoicepage.errors import InvalidNumericInput

logger = logging.getLogger(__name__)

_SEPARATORS = (".", ",")
# Leading number like JavaScript's parseFloat, but either separator counts as decimal point.
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+)(?:[eE][+-]?\d+)?)")
_ZERO = Decimal("0")
_MAX_MAGNITUDE = 28


class NormalizedField(NamedTuple):
    display: str
    value: Decimal


def is_partial_entry(raw: str) -> bool:
    """True while the user is still typing the fractional part ("12." or "12,0")."""
    if not raw:
        return False
    last = raw[-1]
    if last in _SEPARATORS:
        return True
    return last == "0" and any(sep in raw for sep in _SEPARATORS)


def _parse_strict(text: str) -> Decimal:
    match = _NUMBER_PREFIX.match(text)
    if not match:
        raise InvalidNumericInput(f"no numeric prefix in {text!r}")
    literal = match.group(1).replace(",", ".")
    try:
        value = Decimal(literal)
    except InvalidOperation as exc:
        raise InvalidNumericInput(f"unparseable number {literal!r}") from exc
    if value and abs(value.adjusted()) > _MAX_MAGNITUDE:
        raise InvalidNumericInput(f"number out of range {literal!r}")
    return value


def parse_decimal(value: Any) -> Decimal:
    """Best-effort numeric value of a field; anything unusable is zero."""
    if value is None:
        return _ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else _ZERO
    if isinstance(value, bool):
        return _ZERO
    if isinstance(value, (int, float)):
        value = str(value)
    try:
        parsed = _parse_strict(str(value))
    except InvalidNumericInput:
        logger.debug("decimal_field.invalid_input", extra={"raw": str(value)[:40]})
        return _ZERO
    # "0", "-0", "0e5" carry no meaningful digits
    return parsed if parsed else _ZERO


def format_decimal_text(value: Decimal) -> str:
    if not value:
        return "0"
    with localcontext() as ctx:
        # normalize rounds to context precision
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits))
        text = format(value.normalize(), "f")
    return text.replace(".", ",")


def normalize(raw: Any) -> NormalizedField:
    text = "" if raw is None else str(raw)
    value = parse_decimal(text)
    if is_partial_entry(text):
        return NormalizedField(text, value)
    return NormalizedField(format_decimal_text(value), value)
