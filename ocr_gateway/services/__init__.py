"""
Сервисы OCR Gateway.

Модули:
    - resolver: публичные пути <-> пути на диске, защита от выхода из корня
    - storage: локальное хранилище файлов
    - uploads: загрузка/удаление/листинг с ответами без исключений
    - file_server: раздача файлов по HTTP
    - ocr_gateway: отправка документов и изображений на OCR
"""

from ocr_gateway.services.file_server import ServedFile, serve_file
from ocr_gateway.services.ocr_gateway import MistralOCRClient, OCRGateway
from ocr_gateway.services.resolver import get_public_url
from ocr_gateway.services.storage import LocalObjectStore
from ocr_gateway.services.uploads import (
    delete_file,
    list_files,
    upload_image,
    upload_pdf,
)

__all__ = [
    "LocalObjectStore",
    "OCRGateway",
    "MistralOCRClient",
    "ServedFile",
    "serve_file",
    "get_public_url",
    "upload_pdf",
    "upload_image",
    "delete_file",
    "list_files",
]
