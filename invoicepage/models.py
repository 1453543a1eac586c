from __future__ import annotations

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel


class _Snapshot(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _text_fields(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields.get(info.field_name or "")
        if field is None or field.annotation is not str:
            return value
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return str(value)


class LineItem(_Snapshot):
    description: str = ""
    quantity: str = ""
    rate: str = ""

    @property
    def is_blank(self) -> bool:
        return not self.description


Page = Tuple[LineItem, ...]


def _coerce_page(raw: Any) -> list[Any]:
    if isinstance(raw, (list, tuple)):
        return [item for item in raw if isinstance(item, (dict, LineItem))]
    return []


class Invoice(_Snapshot):
    """One editable invoice document; every edit yields a new instance."""

    logo: str = ""
    logo_width: int = 100
    title: str = "Rechnung"
    company_name: str = ""
    company_name2: str = ""
    name: str = ""
    company_address: str = ""
    company_address2: str = ""
    company_country: str = "Deutschland"

    bill_to: str = "Kunde:"
    client_name: str = ""
    client_address: str = ""
    client_address2: str = ""
    client_country: str = "Deutschland"

    invoice_title_label: str = "Rechnungsnr."
    invoice_title: str = ""
    invoice_date_label: str = "Rechnungsdatum"
    invoice_date: str = ""
    invoice_due_date_label: str = "Fällig am"
    invoice_due_date: str = ""

    product_line_description: str = "Beschreibung"
    product_line_quantity: str = "Menge"
    product_line_quantity_rate: str = "Einzelpreis"
    product_line_quantity_amount: str = "Betrag"

    pages: Tuple[Page, ...] = Field(default=((),), alias="pageProductLines")

    sub_total_label: str = "Zwischensumme"
    tax_label: str = "MwSt. (19%)"
    total_label: str = "Gesamt"
    currency: str = "€"

    notes_label: str = "Notizen"
    notes: str = ""
    term_label: str = "Zahlungsbedingungen"
    term: str = ""

    vat_id_label: str = Field(default="USt-IdNr.", alias="umsatzsteuerLabel")
    vat_id: str = Field(default="", alias="umsatzsteuer")
    iban_label: str = "IBAN"
    iban: str = ""
    bic_label: str = "BIC"
    bic: str = ""

    @model_validator(mode="before")
    @classmethod
    def _legacy_product_lines(cls, data: Any) -> Any:
        # Older snapshots kept one flat "productLines" list instead of pages.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        by_alias = data.pop("pageProductLines", None)
        by_name = data.pop("pages", None)
        pages = by_alias or by_name
        legacy = data.pop("productLines", None) or data.pop("product_lines", None)
        if not pages and legacy:
            pages = [legacy]
        if not isinstance(pages, (list, tuple)) or not pages:
            pages = [[]]
        data["pageProductLines"] = [_coerce_page(page) for page in pages]
        return data

    @field_validator("logo_width", mode="before")
    @classmethod
    def _logo_width(cls, value: Any) -> int:
        if isinstance(value, bool):
            return 100
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 100

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
