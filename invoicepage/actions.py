from __future__ import annotations

import logging
from typing import Any

from invoicepage.decimal_field import normalize
from invoicepage.models import Invoice, LineItem, Page
from invoicepage.pagination import clamp_page_index, materialize_page

logger = logging.getLogger(__name__)

BLANK_LINE_ITEM = LineItem(description="", quantity="1", rate="0,00")

_LINE_FIELDS = ("description", "quantity", "rate")


def _replace_page(invoice: Invoice, page_index: int, items: Page) -> Invoice:
    pages = list(materialize_page(invoice.pages, page_index))
    pages[clamp_page_index(page_index)] = items
    return invoice.model_copy(update={"pages": tuple(pages)})


def add_page(invoice: Invoice) -> Invoice:
    return invoice.model_copy(update={"pages": invoice.pages + ((),)})


def add_line(invoice: Invoice, page_index: int) -> Invoice:
    pages = materialize_page(invoice.pages, page_index)
    items = pages[clamp_page_index(page_index)]
    return _replace_page(invoice, page_index, items + (BLANK_LINE_ITEM,))


def remove_line(invoice: Invoice, page_index: int, index: int) -> Invoice:
    pages = materialize_page(invoice.pages, page_index)
    items = pages[clamp_page_index(page_index)]
    kept = tuple(item for i, item in enumerate(items) if i != index)
    return _replace_page(invoice, page_index, kept)


def update_line(invoice: Invoice, page_index: int, index: int, field: str, value: str) -> Invoice:
    """Edit one cell of a line item on the given page.

    Descriptions are stored as typed; quantity and rate go through the
    decimal field parser so that "12,50" stays mid-edit but "7.5" becomes
    "7,5".
    """
    pages = materialize_page(invoice.pages, page_index)
    items = list(pages[clamp_page_index(page_index)])

    if field not in _LINE_FIELDS:
        logger.debug("actions.unknown_line_field", extra={"field": field})
        return invoice.model_copy(update={"pages": pages})
    if not 0 <= index < len(items):
        logger.debug(
            "actions.line_out_of_range",
            extra={"page_index": page_index, "index": index, "count": len(items)},
        )
        return invoice.model_copy(update={"pages": pages})

    text = "" if value is None else str(value)
    if field != "description":
        text = normalize(text).display
    items[index] = items[index].model_copy(update={field: text})
    return _replace_page(invoice, page_index, tuple(items))


def update_field(invoice: Invoice, name: str, value: Any) -> Invoice:
    """Set a header/party/label field; pages are only changed via the line ops."""
    if name not in Invoice.model_fields or name == "pages":
        logger.debug("actions.field_rejected", extra={"field": name})
        return invoice
    if name == "logo_width":
        if isinstance(value, bool) or not isinstance(value, int):
            logger.debug("actions.field_type_mismatch", extra={"field": name})
            return invoice
    elif not isinstance(value, str):
        logger.debug("actions.field_type_mismatch", extra={"field": name})
        return invoice
    return invoice.model_copy(update={name: value})
