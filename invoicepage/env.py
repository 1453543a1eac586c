from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_LOADED = False


def load_env() -> Path | None:
    """Load the first matching .env file once; real environment variables win."""
    global _LOADED
    if _LOADED:
        return None
    _LOADED = True

    base_dir = Path(__file__).resolve().parent
    # Project root first so a checkout-level .env beats the package one.
    candidates = [
        base_dir.parent / ".env",
        base_dir / ".env",
        Path.cwd() / ".env",
    ]

    for path in candidates:
        if not path.exists():
            continue
        load_dotenv(dotenv_path=path, override=False)
        if os.getenv("INVOICE_DEBUG") == "1":
            logger.debug("env.loaded", extra={"path": str(path)})
        return path
    return None
