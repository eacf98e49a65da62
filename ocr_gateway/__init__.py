"""
OCR Gateway — приём файлов и распознавание через Mistral OCR.

Объединяет в одном FastAPI приложении:
    - Локальное хранилище загруженных PDF и изображений (том в контейнере)
    - Раздачу файлов по публичным путям /uploads/...
    - Отправку документов и изображений на OCR провайдеру
"""

from ocr_gateway.config import settings
from ocr_gateway.schemas import DeleteResult, ListResult, OCRRequest, UploadResult

__all__ = [
    "settings",
    "UploadResult",
    "DeleteResult",
    "ListResult",
    "OCRRequest",
]
