from __future__ import annotations

from unittest.mock import MagicMock

import fitz  # PyMuPDF
import pytest

from eduai.bedrock_client import get_gateway
from eduai.main import app


@pytest.fixture
def fake_gateway():
    """Replaces the Bedrock gateway for every route; set `invoke_text.return_value` per test."""
    gateway = MagicMock()
    gateway.invoke_text.return_value = ""
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield gateway
    app.dependency_overrides = {}


def build_pdf(*pages: str) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf():
    return build_pdf
