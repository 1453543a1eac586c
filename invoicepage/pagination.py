"""Two views over the same pages of line items.

Edit mode keeps the pages exactly as the user built them; export mode ignores
those boundaries and re-chunks every item into fixed-size pages.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from invoicepage.invoice_calculations import flatten_line_items
from invoicepage.models import LineItem, Page


def clamp_page_index(page_index: int) -> int:
    return max(0, int(page_index))


def materialize_page(pages: Sequence[Page], page_index: int) -> tuple[Page, ...]:
    """Pages padded with empty ones so that ``page_index`` exists."""
    index = clamp_page_index(page_index)
    missing = index + 1 - len(pages)
    if missing <= 0:
        return tuple(pages)
    return tuple(pages) + ((),) * missing


def page_items(pages: Sequence[Page], page_index: int) -> Page:
    index = clamp_page_index(page_index)
    if index < len(pages):
        return pages[index]
    return ()


@dataclass(frozen=True)
class ExportPage:
    number: int
    items: tuple[LineItem, ...]
    show_header: bool
    show_footer: bool

    # every export page repeats the table header row
    show_table_header: bool = True

    @property
    def visible_items(self) -> tuple[LineItem, ...]:
        return tuple(item for item in self.items if not item.is_blank)


def export_page_count(item_count: int, capacity: int) -> int:
    capacity = max(1, int(capacity))
    return max(1, math.ceil(item_count / capacity))


def chunk_for_export(pages: Iterable[Page], capacity: int) -> list[ExportPage]:
    items = tuple(flatten_line_items(pages))
    capacity = max(1, int(capacity))
    count = export_page_count(len(items), capacity)

    export_pages: list[ExportPage] = []
    for page_num in range(count):
        start = page_num * capacity
        export_pages.append(
            ExportPage(
                number=page_num + 1,
                items=items[start : start + capacity],
                show_header=page_num == 0,
                show_footer=page_num == count - 1,
            )
        )
    return export_pages
