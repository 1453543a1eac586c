from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from invoicepage.actions import BLANK_LINE_ITEM
from invoicepage.models import Invoice

logger = logging.getLogger(__name__)


def new_invoice(**fields: Any) -> Invoice:
    """Fresh invoice: default German labels, one page holding one blank line."""
    return Invoice(pages=((BLANK_LINE_ITEM,),), **fields)


def hydrate_invoice(data: Mapping[str, Any] | Invoice | None) -> Invoice:
    if isinstance(data, Invoice):
        return data
    if data is None:
        return new_invoice()
    if not isinstance(data, Mapping):
        logger.warning("data.hydrate_unsupported", extra={"type": type(data).__name__})
        return new_invoice()
    return Invoice.model_validate(dict(data))
