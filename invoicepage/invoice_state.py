"""Recompute pipeline and the single-owner editing session.

Each mutation builds a complete new ``EditorState`` (invoice snapshot,
selected page and derived values) and swaps it in one assignment, so readers
never see totals that belong to an older snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Optional

from invoicepage import actions
from invoicepage.config import Settings, load_settings
from invoicepage.data import hydrate_invoice, new_invoice
from invoicepage.invoice_calculations import (
    InvoiceTotals,
    calculate_invoice_totals,
    format_amount,
    line_amount,
)
from invoicepage.invoice_dates import format_date, resolve_invoice_dates
from invoicepage.models import Invoice, Page
from invoicepage.pagination import ExportPage, chunk_for_export, clamp_page_index, page_items
from invoicepage.services.qr_code import QrCodeEncoder
from invoicepage.services.sepa_payload import payload_for_invoice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceView:
    totals: InvoiceTotals
    payload: Optional[str]
    invoice_date: date
    due_date: date

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.totals.display(),
            "taxRate": str(self.totals.tax_rate),
            "payload": self.payload,
            "invoiceDate": format_date(self.invoice_date),
            "dueDate": format_date(self.due_date),
        }


def recompute(invoice: Invoice, settings: Settings, *, today: Optional[date] = None) -> InvoiceView:
    # subtotal -> tax -> total, then the payment payload from the same subtotal
    totals = calculate_invoice_totals(invoice.pages, invoice.tax_label)
    payload = payload_for_invoice(invoice, totals.raw_subtotal, settings)
    issued, due = resolve_invoice_dates(
        invoice.invoice_date,
        invoice.invoice_due_date,
        today=today,
        due_days=settings.due_days,
    )
    return InvoiceView(totals=totals, payload=payload, invoice_date=issued, due_date=due)


@dataclass(frozen=True)
class EditorState:
    invoice: Invoice
    selected_page: int
    view: InvoiceView


class InvoiceEditor:
    def __init__(
        self,
        invoice: Invoice | Mapping[str, Any] | None = None,
        *,
        settings: Optional[Settings] = None,
        qr_encoder: Optional[QrCodeEncoder] = None,
        today: Optional[date] = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._qr_encoder = qr_encoder
        self._today = today
        snapshot = hydrate_invoice(invoice) if invoice is not None else new_invoice()
        self._state = self._build_state(snapshot, 0)
        self._publish_payload(None)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def invoice(self) -> Invoice:
        return self._state.invoice

    @property
    def view(self) -> InvoiceView:
        return self._state.view

    @property
    def selected_page(self) -> int:
        return self._state.selected_page

    @property
    def page_count(self) -> int:
        return max(self._state.invoice.page_count, self._state.selected_page + 1)

    @property
    def qr_data_url(self) -> Optional[str]:
        if self._qr_encoder is None:
            return None
        return self._qr_encoder.data_url

    def _build_state(self, invoice: Invoice, selected_page: int) -> EditorState:
        return EditorState(
            invoice=invoice,
            selected_page=clamp_page_index(selected_page),
            view=recompute(invoice, self._settings, today=self._today),
        )

    def _publish_payload(self, previous: Optional[str]) -> None:
        if self._qr_encoder is None:
            return
        payload = self._state.view.payload
        if payload == previous and self._qr_encoder.payload == payload:
            return
        self._qr_encoder.submit(payload)

    def _apply(self, mutate: Callable[[Invoice], Invoice], selected_page: Optional[int] = None) -> EditorState:
        previous = self._state
        invoice = mutate(previous.invoice)
        page = previous.selected_page if selected_page is None else selected_page
        self._state = self._build_state(invoice, page)
        self._publish_payload(previous.view.payload)
        return self._state

    def load(self, data: Invoice | Mapping[str, Any] | None) -> EditorState:
        logger.debug("invoice_state.load")
        return self._apply(lambda _: hydrate_invoice(data), selected_page=0)

    def select_page(self, page_index: int) -> EditorState:
        previous = self._state
        self._state = EditorState(
            invoice=previous.invoice,
            selected_page=clamp_page_index(page_index),
            view=previous.view,
        )
        return self._state

    def add_page(self) -> EditorState:
        new_index = self._state.invoice.page_count
        return self._apply(actions.add_page, selected_page=new_index)

    def add_line(self) -> EditorState:
        page = self._state.selected_page
        return self._apply(lambda invoice: actions.add_line(invoice, page))

    def update_line(self, index: int, field: str, value: str) -> EditorState:
        page = self._state.selected_page
        return self._apply(lambda invoice: actions.update_line(invoice, page, index, field, value))

    def remove_line(self, index: int) -> EditorState:
        page = self._state.selected_page
        return self._apply(lambda invoice: actions.remove_line(invoice, page, index))

    def update_field(self, name: str, value: Any) -> EditorState:
        return self._apply(lambda invoice: actions.update_field(invoice, name, value))

    def current_page_items(self) -> Page:
        return page_items(self._state.invoice.pages, self._state.selected_page)

    def line_amounts(self) -> list[str]:
        return [format_amount(line_amount(item.quantity, item.rate)) for item in self.current_page_items()]

    def export_pages(self) -> list[ExportPage]:
        return chunk_for_export(self._state.invoice.pages, self._settings.export_page_capacity)

    def to_dict(self) -> dict[str, Any]:
        state = self._state
        return {
            "invoice": state.invoice.to_dict(),
            "selectedPage": state.selected_page,
            "pageCount": self.page_count,
            "computed": state.view.to_dict(),
            "qrCode": self.qr_data_url,
        }
