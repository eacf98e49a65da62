"""
OCR Gateway — FastAPI приложение.

Хранит загруженные файлы на локальном томе, раздаёт их по публичным
путям и отправляет документы/изображения на OCR провайдеру.

Эндпоинты:
    POST   /uploads/pdf            — загрузка PDF
    POST   /uploads/image          — загрузка изображения (JPEG/PNG)
    DELETE /uploads/{path}         — удаление файла
    GET    /files?prefix=<папка>   — список файлов папки
    GET    /api/files/{path}       — раздача файла
    GET    /uploads/{path}         — то же по публичному пути
    POST   /ocr/document           — OCR документа по URL или пути
    POST   /ocr/image              — OCR изображения по URL или пути
    GET    /health                 — проверка работоспособности

Запуск:
    uvicorn ocr_gateway.main:app --host 0.0.0.0 --port 8000
"""

import json
import logging
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from ocr_gateway.config import settings
from ocr_gateway.errors import GatewayError
from ocr_gateway.schemas import DeleteResult, ListResult, OCRRequestBody, UploadResult
from ocr_gateway.services.file_server import serve_file
from ocr_gateway.services.ocr_gateway import OCRGateway
from ocr_gateway.services.storage import LocalObjectStore
from ocr_gateway.services.uploads import delete_file, list_files, upload_image, upload_pdf

# Настройка логгера
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [OCR-Gateway] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


class UnicodeJSONResponse(JSONResponse):
    """JSON ответ с нормальным отображением кириллицы (без \\uXXXX экранирования)."""

    def render(self, content) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=None,
            separators=(",", ":"),
        ).encode("utf-8")


# FastAPI приложение
app = FastAPI(
    title="OCR Gateway",
    description="Хранение загруженных файлов и распознавание текста через Mistral OCR",
    version="1.0.0",
    default_response_class=UnicodeJSONResponse,
)


# =============================================================================
# Зависимости
# =============================================================================


def get_store() -> LocalObjectStore:
    """Хранилище с корнем из настроек (в тестах подменяется)."""
    return LocalObjectStore(settings.upload_dir)


def get_gateway(store: LocalObjectStore = Depends(get_store)) -> OCRGateway:
    """OCR шлюз с ключом и моделью из настроек (в тестах подменяется)."""
    return OCRGateway(store, api_key=settings.api_key, model=settings.ocr_model)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Ошибки сервиса -> HTTP статус + {"detail": {"error", "message"}}."""
    logger.warning(f"{request.method} {request.url.path}: {exc.code}: {exc.message}")
    return UnicodeJSONResponse(
        status_code=exc.status_code,
        content={"detail": {"error": exc.code, "message": exc.message}},
    )


# =============================================================================
# Служебные эндпоинты
# =============================================================================


@app.get("/health")
async def health_check() -> dict:
    """
    Проверка работоспособности сервиса.

    Returns:
        dict: статус и текущая конфигурация (без секретов)
    """
    upload_dir_ok = settings.upload_dir.is_dir()

    return {
        "status": "ok" if upload_dir_ok else "degraded",
        "service": "ocr-gateway",
        "version": "1.0.0",
        "storage": {
            "upload_dir": str(settings.upload_dir),
            "available": upload_dir_ok,
        },
        "config": {
            "max_file_size_mb": settings.max_file_size_mb,
            "ocr_model": settings.ocr_model,
            "api_key_configured": bool(settings.api_key),
        },
    }


# =============================================================================
# Хранилище файлов
# =============================================================================


@app.post("/uploads/pdf", response_model=UploadResult)
async def upload_pdf_endpoint(
    file: UploadFile = File(..., description="PDF файл"),
    folder_name: str = Form(default="pdfs", description="Папка назначения"),
    file_name: Optional[str] = Form(default=None, description="Имя файла (по умолчанию <uuid>_<имя>)"),
    store: LocalObjectStore = Depends(get_store),
) -> UploadResult:
    """
    Загружает PDF в локальное хранилище.

    Returns:
        UploadResult: url (/uploads/<папка>/<файл>) или error
    """
    file_bytes = await file.read()
    logger.info(f"Получен PDF: {file.filename}, {len(file_bytes)} байт, папка={folder_name}")

    return await run_in_threadpool(
        upload_pdf,
        store,
        file_bytes,
        file.content_type or "",
        file.filename or "unknown.pdf",
        folder_name,
        file_name=file_name or None,
    )


@app.post("/uploads/image", response_model=UploadResult)
async def upload_image_endpoint(
    file: UploadFile = File(..., description="Изображение JPEG или PNG"),
    folder_name: str = Form(default="images", description="Папка назначения"),
    file_name: Optional[str] = Form(default=None, description="Имя файла (по умолчанию <uuid>_<имя>)"),
    store: LocalObjectStore = Depends(get_store),
) -> UploadResult:
    """
    Загружает изображение в локальное хранилище.

    Returns:
        UploadResult: url (/uploads/<папка>/<файл>) или error
    """
    file_bytes = await file.read()
    logger.info(f"Получено изображение: {file.filename}, {len(file_bytes)} байт, папка={folder_name}")

    return await run_in_threadpool(
        upload_image,
        store,
        file_bytes,
        file.content_type or "",
        file.filename or "unknown.png",
        folder_name,
        file_name=file_name or None,
    )


@app.delete("/uploads/{file_path:path}", response_model=DeleteResult)
async def delete_file_endpoint(
    file_path: str,
    store: LocalObjectStore = Depends(get_store),
) -> DeleteResult:
    """Удаляет файл по публичному пути."""
    return await run_in_threadpool(delete_file, store, file_path)


@app.get("/files", response_model=ListResult)
async def list_files_endpoint(
    prefix: str = Query(..., description="Папка: pdfs, images, ..."),
    store: LocalObjectStore = Depends(get_store),
) -> ListResult:
    """Список файлов папки; для несуществующей папки — пустой список."""
    return await run_in_threadpool(list_files, store, prefix)


@app.get("/api/files/{file_path:path}")
@app.get("/uploads/{file_path:path}")
async def get_file(
    file_path: str,
    store: LocalObjectStore = Depends(get_store),
) -> Response:
    """
    Отдаёт файл из хранилища целиком.

    Коды: 200, 400 (не файл), 403 (выход за корень), 404, 500.
    """
    served = await run_in_threadpool(serve_file, store, file_path)
    return Response(
        content=served.body,
        status_code=served.status_code,
        headers=served.headers,
    )


# =============================================================================
# OCR
# =============================================================================


@app.post("/ocr/document")
async def ocr_document(
    body: OCRRequestBody,
    gateway: OCRGateway = Depends(get_gateway),
) -> Any:
    """
    OCR документа (PDF) по https:// URL или пути в хранилище.

    Returns:
        Ответ провайдера без изменений (страницы, markdown, изображения)
    """
    return await _run_ocr(gateway.process_document, body)


@app.post("/ocr/image")
async def ocr_image(
    body: OCRRequestBody,
    gateway: OCRGateway = Depends(get_gateway),
) -> Any:
    """
    OCR изображения по https:// URL или пути в хранилище.

    Returns:
        Ответ провайдера без изменений
    """
    return await _run_ocr(gateway.process_image, body)


async def _run_ocr(process: Callable[[str, bool], Any], body: OCRRequestBody) -> Any:
    """
    Выполняет OCR в threadpool (клиент провайдера синхронный).

    Ошибки сервиса уходят в gateway_error_handler, ошибки провайдера -> 502.
    """
    try:
        return await run_in_threadpool(process, body.source, body.include_image_base64)
    except GatewayError:
        raise
    except Exception as e:
        logger.exception(f"Ошибка OCR провайдера: {e}")
        raise HTTPException(
            status_code=502,
            detail={
                "error": "vendor_error",
                "message": str(e),
            },
        )


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Запуск OCR Gateway на порту {settings.port}")
    logger.info(f"Хранилище: {settings.upload_dir}")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.port,
        log_level="info",
    )
