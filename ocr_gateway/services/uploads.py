"""
Операции загрузки, удаления и листинга файлов.

В отличие от LocalObjectStore, эти функции не бросают исключений:
любая ошибка превращается в ответ с заполненным полем error,
вызывающий код ветвится по тому, какое поле заполнено.
"""

import logging
from typing import Optional

from ocr_gateway.config import settings
from ocr_gateway.errors import GatewayError, UnknownIO
from ocr_gateway.schemas import DeleteResult, ListResult, UploadResult
from ocr_gateway.services.storage import LocalObjectStore

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPES = frozenset({"application/pdf", "application/x-pdf"})
IMAGE_CONTENT_TYPES = frozenset({"image/jpeg", "image/png"})


def upload_file(
    store: LocalObjectStore,
    content: bytes,
    content_type: str,
    original_name: str,
    folder_name: str,
    file_name: Optional[str] = None,
    allowed_content_types: frozenset = PDF_CONTENT_TYPES,
    max_size_bytes: Optional[int] = None,
) -> UploadResult:
    """
    Сохраняет файл в хранилище.

    Предельный размер по умолчанию берётся из settings.max_file_size_mb.

    Returns:
        UploadResult: url при успехе, error/error_code при ошибке
    """
    if max_size_bytes is None:
        max_size_bytes = settings.max_file_size_bytes

    try:
        url = store.put(
            content,
            content_type=content_type,
            original_name=original_name,
            folder_name=folder_name,
            file_name=file_name,
            allowed_content_types=allowed_content_types,
            max_size_bytes=max_size_bytes,
        )
    except GatewayError as e:
        logger.warning(f"Загрузка отклонена: {original_name} -> {folder_name}: {e.message}")
        return UploadResult.failed(e)
    except Exception as e:
        logger.exception(f"Ошибка загрузки {original_name}: {e}")
        return UploadResult.failed(UnknownIO(str(e) or "Неизвестная ошибка"))

    return UploadResult(url=url)


def upload_pdf(
    store: LocalObjectStore,
    content: bytes,
    content_type: str,
    original_name: str,
    folder_name: str = "pdfs",
    file_name: Optional[str] = None,
    max_size_bytes: Optional[int] = None,
) -> UploadResult:
    """Загрузка PDF документа (по умолчанию в папку pdfs)."""
    return upload_file(
        store,
        content,
        content_type,
        original_name,
        folder_name,
        file_name=file_name,
        allowed_content_types=PDF_CONTENT_TYPES,
        max_size_bytes=max_size_bytes,
    )


def upload_image(
    store: LocalObjectStore,
    content: bytes,
    content_type: str,
    original_name: str,
    folder_name: str = "images",
    file_name: Optional[str] = None,
    max_size_bytes: Optional[int] = None,
) -> UploadResult:
    """Загрузка изображения JPEG/PNG (по умолчанию в папку images)."""
    return upload_file(
        store,
        content,
        content_type,
        original_name,
        folder_name,
        file_name=file_name,
        allowed_content_types=IMAGE_CONTENT_TYPES,
        max_size_bytes=max_size_bytes,
    )


def delete_file(store: LocalObjectStore, file_path: str) -> DeleteResult:
    """
    Удаляет файл по публичному или относительному пути.

    Returns:
        DeleteResult: success=True или error/error_code
    """
    try:
        store.delete(file_path)
    except GatewayError as e:
        logger.warning(f"Удаление не выполнено: {file_path}: {e.message}")
        return DeleteResult.failed(e)
    except Exception as e:
        logger.exception(f"Ошибка удаления {file_path}: {e}")
        return DeleteResult.failed(UnknownIO(str(e) or "Неизвестная ошибка"))

    return DeleteResult(success=True)


def list_files(store: LocalObjectStore, prefix: str) -> ListResult:
    """
    Список файлов папки.

    Отсутствующая папка — не ошибка: возвращается пустой список.
    """
    try:
        files = store.list(prefix)
    except GatewayError as e:
        logger.warning(f"Листинг не выполнен: {prefix}: {e.message}")
        return ListResult.failed(e)
    except Exception as e:
        logger.exception(f"Ошибка листинга {prefix}: {e}")
        return ListResult.failed(UnknownIO(str(e) or "Неизвестная ошибка"))

    return ListResult(files=files)
