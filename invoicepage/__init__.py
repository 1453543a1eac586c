"""Computational core of the editable invoice page.

Hosts call ``setup_logging`` once at startup to route the package's event
logs to stdout and a rotating file.
"""

from invoicepage.logging_setup import setup_logging

__all__ = ["setup_logging"]
__version__ = "0.3.0"
