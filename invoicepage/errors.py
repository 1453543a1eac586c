from __future__ import annotations


class InvoiceCoreError(Exception):
    """Base class for degradations inside the invoice core.

    None of these leave the public API: every caller inside the package
    catches them and falls back to a neutral value.
    """


class InvalidNumericInput(InvoiceCoreError, ValueError):
    pass


class MissingBankingDetails(InvoiceCoreError):
    pass


class MalformedTaxLabel(InvoiceCoreError, ValueError):
    pass
