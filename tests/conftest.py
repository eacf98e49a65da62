"""
Общие фикстуры тестов OCR Gateway.

    - store: хранилище во временном каталоге (каталог root ещё не создан)
    - ocr_stub: заглушка клиента OCR провайдера, запоминающая вызовы
    - client: TestClient с подменёнными зависимостями
"""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from ocr_gateway.main import app, get_gateway, get_store
from ocr_gateway.services.ocr_gateway import OCRGateway
from ocr_gateway.services.storage import LocalObjectStore

PNG_10_BYTES = b"\x89PNG\r\n\x1a\nab"


class StubOCRClient:
    """Заглушка провайдера: возвращает фиксированный ответ и пишет вызовы."""

    def __init__(self, response: Any = None, error: Exception = None):
        self.response = response if response is not None else {
            "pages": [{"index": 0, "markdown": "# Hello"}],
            "model": "mistral-ocr-latest",
        }
        self.error = error
        self.calls: list[dict] = []
        self.api_keys: list[str] = []

    def factory(self, api_key: str) -> "StubOCRClient":
        self.api_keys.append(api_key)
        return self

    def process(self, model: str, document: dict, include_image_base64: bool) -> Any:
        self.calls.append(
            {
                "model": model,
                "document": document,
                "include_image_base64": include_image_base64,
            }
        )
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def store(tmp_path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "uploads")


@pytest.fixture
def ocr_stub() -> StubOCRClient:
    return StubOCRClient()


@pytest.fixture
def gateway(store, ocr_stub) -> OCRGateway:
    return OCRGateway(store, api_key="test-key", client_factory=ocr_stub.factory)


@pytest.fixture
def client(store, gateway):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
