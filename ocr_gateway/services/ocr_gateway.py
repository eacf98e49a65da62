"""
Шлюз к OCR провайдеру (Mistral OCR).

Принимает ссылку на документ или изображение:
    - https:// URL передаётся провайдеру как есть
    - любой другой путь считается ключом локального хранилища:
      файл читается и передаётся как data:<mime>;base64,<...>

Один вызов — один запрос к провайдеру. Повторов нет, ошибки
провайдера пробрасываются вызывающему без изменений.
"""

import base64
import logging
from pathlib import PurePosixPath
from typing import Any, Callable, Optional, Protocol

from mistralai import Mistral

from ocr_gateway.errors import (
    LocalFileUnreadable,
    MissingCredential,
    MissingInput,
    NotFound,
    UnknownIO,
)
from ocr_gateway.schemas import OCRKind, OCRRequest
from ocr_gateway.services.storage import LocalObjectStore

logger = logging.getLogger(__name__)

DEFAULT_OCR_MODEL = "mistral-ocr-latest"

REMOTE_SCHEME = "https://"

# MIME типы, которые понимает провайдер; остальное уходит как octet-stream
_DATA_URI_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


class OCRClient(Protocol):
    """Узкий интерфейс клиента провайдера: один вызов OCR."""

    def process(self, model: str, document: dict, include_image_base64: bool) -> Any:
        ...


class MistralOCRClient:
    """Клиент Mistral OCR поверх официальной библиотеки mistralai."""

    def __init__(self, api_key: str):
        self._client = Mistral(api_key=api_key)

    def process(self, model: str, document: dict, include_image_base64: bool) -> Any:
        return self._client.ocr.process(
            model=model,
            document=document,
            include_image_base64=include_image_base64,
        )


class OCRGateway:
    """
    Отправляет документы и изображения на OCR.

    Args:
        store: локальное хранилище для чтения файлов по ключу
        api_key: ключ API провайдера; проверяется при каждом вызове
        model: идентификатор модели OCR
        client_factory: создаёт клиента по ключу API (в тестах — заглушка)
    """

    def __init__(
        self,
        store: LocalObjectStore,
        api_key: Optional[str],
        model: str = DEFAULT_OCR_MODEL,
        client_factory: Callable[[str], OCRClient] = MistralOCRClient,
    ):
        self.store = store
        self.api_key = api_key
        self.model = model
        self.client_factory = client_factory

    def process_document(self, document_url: str, include_image_base64: bool = True) -> Any:
        """OCR документа (PDF) по URL или ключу хранилища."""
        return self.perform_ocr(
            OCRRequest(
                source=document_url,
                include_image_base64=include_image_base64,
                kind=OCRKind.DOCUMENT,
            )
        )

    def process_image(self, image_url: str, include_image_base64: bool = True) -> Any:
        """OCR изображения по URL или ключу хранилища."""
        return self.perform_ocr(
            OCRRequest(
                source=image_url,
                include_image_base64=include_image_base64,
                kind=OCRKind.IMAGE,
            )
        )

    def perform_ocr(self, request: OCRRequest) -> Any:
        """
        Выполняет OCR запрос.

        Шаги:
            1. Проверка источника и ключа API
            2. Локальный файл -> data URI, https:// URL -> как есть
            3. Один вызов провайдера

        Args:
            request: источник, тип (документ/изображение), флаг изображений

        Returns:
            Ответ провайдера без изменений

        Raises:
            MissingInput: источник не указан
            MissingCredential: ключ API не задан
            Forbidden: путь выходит за пределы хранилища
            LocalFileUnreadable: локальный файл не удалось прочитать
        """
        if not request.source:
            raise MissingInput(
                "Не указан URL документа"
                if request.kind == OCRKind.DOCUMENT
                else "Не указан URL изображения"
            )

        if not self.api_key:
            raise MissingCredential("Не задан OCR_API_KEY в переменных окружения")

        if request.source.startswith(REMOTE_SCHEME):
            source = request.source
        else:
            logger.info(f"Локальный файл -> base64: {request.source}")
            source = self._to_data_uri(request.source)

        client = self.client_factory(self.api_key)

        if request.kind == OCRKind.DOCUMENT:
            document = {"type": "document_url", "document_url": source}
        else:
            document = {"type": "image_url", "image_url": source}

        logger.info(
            f"OCR запрос: kind={request.kind.value}, model={self.model}, "
            f"include_image_base64={request.include_image_base64}"
        )
        try:
            return client.process(
                model=self.model,
                document=document,
                include_image_base64=request.include_image_base64,
            )
        except Exception as e:
            logger.error(f"Ошибка OCR провайдера: {e}")
            raise

    def _to_data_uri(self, key: str) -> str:
        """
        Читает файл из хранилища и кодирует его в data URI.

        Raises:
            Forbidden: путь выходит за пределы хранилища
            LocalFileUnreadable: файла нет или чтение не удалось
        """
        try:
            stored = self.store.get(key)
        except (NotFound, UnknownIO) as e:
            logger.error(f"Ошибка чтения локального файла: {e.message}")
            raise LocalFileUnreadable(f"Не удалось прочитать локальный файл: {key}") from e

        mime_type = _DATA_URI_MIME_TYPES.get(
            PurePosixPath(stored.file_name).suffix.lower(),
            "application/octet-stream",
        )
        payload = base64.b64encode(stored.content).decode("ascii")
        return f"data:{mime_type};base64,{payload}"
