from __future__ import annotations

from datetime import date
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from invoicepage.config import Settings  # noqa: E402
from invoicepage.services.qr_code import QrCodeEncoder  # noqa: E402


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def fixed_today() -> date:
    return date(2024, 1, 10)


@pytest.fixture()
def fake_qr_encoder():
    encoder = QrCodeEncoder(renderer=lambda payload: f"qr:{payload}")
    yield encoder
    encoder.close()
