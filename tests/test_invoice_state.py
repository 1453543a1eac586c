from __future__ import annotations

from decimal import Decimal

import pytest

from invoicepage.config import Settings
from invoicepage.data import new_invoice
from invoicepage.invoice_state import InvoiceEditor, recompute


@pytest.fixture()
def editor(settings, fixed_today) -> InvoiceEditor:
    return InvoiceEditor(settings=settings, today=fixed_today)


def _fill_first_line(editor: InvoiceEditor, quantity: str = "2", rate: str = "50") -> None:
    editor.update_line(0, "description", "Beratung")
    editor.update_line(0, "quantity", quantity)
    editor.update_line(0, "rate", rate)


def test_fresh_editor_has_zero_totals(editor: InvoiceEditor) -> None:
    assert editor.view.totals.display() == {"subtotal": "0,00", "tax": "0,00", "total": "0,00"}
    assert editor.view.payload is None
    assert editor.page_count == 1
    assert len(editor.current_page_items()) == 1
    assert len(editor.export_pages()) == 1


def test_line_edits_recompute_totals(editor: InvoiceEditor) -> None:
    _fill_first_line(editor)

    totals = editor.view.totals
    assert totals.subtotal == Decimal("100.00")
    assert totals.tax == Decimal("19.00")
    assert totals.total == Decimal("119.00")
    assert editor.line_amounts() == ["100,00"]


def test_tax_label_edit_recomputes_tax(editor: InvoiceEditor) -> None:
    _fill_first_line(editor)

    editor.update_field("tax_label", "MwSt. 7%")

    assert editor.view.totals.tax == Decimal("7.00")
    assert editor.view.totals.total == Decimal("107.00")


def test_mid_edit_quantity_is_kept_and_counted(editor: InvoiceEditor) -> None:
    _fill_first_line(editor, quantity="12.", rate="2")

    assert editor.current_page_items()[0].quantity == "12."
    assert editor.view.totals.subtotal == Decimal("24.00")


def test_pages_do_not_change_totals(editor: InvoiceEditor) -> None:
    _fill_first_line(editor)
    before = editor.view.totals

    editor.add_page()
    assert editor.selected_page == 1
    assert editor.page_count == 2
    assert editor.current_page_items() == ()
    assert editor.view.totals == before

    editor.select_page(0)
    assert editor.view.totals == before
    assert editor.current_page_items()[0].description == "Beratung"


def test_lines_on_other_pages_count_towards_subtotal(editor: InvoiceEditor) -> None:
    _fill_first_line(editor)
    editor.add_page()
    editor.add_line()
    editor.update_line(0, "quantity", "1")
    editor.update_line(0, "rate", "25,5")

    assert editor.view.totals.subtotal == Decimal("125.50")
    assert [len(page) for page in editor.invoice.pages] == [1, 1]


def test_selecting_missing_page_materializes_on_edit(editor: InvoiceEditor) -> None:
    editor.select_page(3)
    assert editor.invoice.page_count == 1
    assert editor.page_count == 4

    editor.add_line()

    assert editor.invoice.page_count == 4
    assert len(editor.invoice.pages[3]) == 1


def test_remove_line_on_selected_page(editor: InvoiceEditor) -> None:
    _fill_first_line(editor)

    editor.remove_line(0)

    assert editor.current_page_items() == ()
    assert editor.view.totals.total == Decimal("0.00")


def test_payload_appears_with_banking_details(editor: InvoiceEditor) -> None:
    _fill_first_line(editor)
    editor.update_field("tax_label", "MwSt. 7%")
    editor.update_field("iban", "DE02120300000000202051")
    assert editor.view.payload is None

    editor.update_field("bic", "BYLADEM1001")

    lines = editor.view.payload.split("\n")
    assert lines[6] == "DE02120300000000202051"
    assert lines[7] == "EUR119.00"


def test_huge_quantities_do_not_break_recompute(editor: InvoiceEditor) -> None:
    editor.update_field("iban", "DE02120300000000202051")
    editor.update_field("bic", "BYLADEM1001")

    _fill_first_line(editor, quantity="100000000000000000000000000", rate="5")

    totals = editor.view.totals
    assert totals.subtotal == Decimal("500000000000000000000000000.00")
    assert totals.total == Decimal("595000000000000000000000000.00")
    assert editor.line_amounts() == ["500000000000000000000000000,00"]
    assert editor.view.payload.split("\n")[7] == "EUR595000000000000000000000000.00"


def test_every_mutation_swaps_in_a_new_state(editor: InvoiceEditor) -> None:
    old_state = editor.state

    _fill_first_line(editor)

    assert old_state.view.totals.subtotal == Decimal("0.00")
    assert old_state.invoice.pages[0][0].description == ""
    assert editor.state is not old_state


def test_qr_code_follows_latest_payload(settings, fixed_today, fake_qr_encoder) -> None:
    editor = InvoiceEditor(settings=settings, today=fixed_today, qr_encoder=fake_qr_encoder)
    _fill_first_line(editor)
    editor.update_field("iban", "DE02120300000000202051")
    editor.update_field("bic", "BYLADEM1001")
    editor.update_field("invoice_title", "2024-0001")

    assert fake_qr_encoder.wait() == f"qr:{editor.view.payload}"
    assert editor.qr_data_url == fake_qr_encoder.data_url

    editor.update_field("bic", "")

    assert fake_qr_encoder.wait() is None
    assert editor.to_dict()["qrCode"] is None


def test_dates_default_to_today_and_thirty_days(editor: InvoiceEditor) -> None:
    computed = editor.to_dict()["computed"]
    assert computed["invoiceDate"] == "2024-01-10"
    assert computed["dueDate"] == "2024-02-09"

    editor.update_field("invoice_date", "2024-03-01")

    assert editor.view.due_date.isoformat() == "2024-03-31"


def test_load_replaces_snapshot_and_resets_page(editor: InvoiceEditor) -> None:
    editor.add_page()

    editor.load({"pageProductLines": [[{"description": "A", "quantity": "2", "rate": "3"}]]})

    assert editor.selected_page == 0
    assert editor.view.totals.subtotal == Decimal("6.00")


def test_to_dict_exposes_snapshot_and_derived_values(editor: InvoiceEditor) -> None:
    _fill_first_line(editor)

    result = editor.to_dict()

    assert result["selectedPage"] == 0
    assert result["pageCount"] == 1
    assert result["invoice"]["pageProductLines"][0][0]["description"] == "Beratung"
    assert result["computed"]["total"] == "119,00"
    assert result["computed"]["taxRate"] == "19"


def test_recompute_is_pure(settings, fixed_today) -> None:
    invoice = new_invoice(iban="DE02120300000000202051", bic="BYLADEM1001")

    first = recompute(invoice, settings, today=fixed_today)
    second = recompute(invoice, settings, today=fixed_today)

    assert first == second


def test_export_capacity_comes_from_settings(fixed_today) -> None:
    editor = InvoiceEditor(settings=Settings(export_page_capacity=2), today=fixed_today)
    editor.add_line()
    editor.add_line()

    pages = editor.export_pages()

    assert [len(page.items) for page in pages] == [2, 1]
