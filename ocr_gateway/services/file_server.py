"""
Раздача файлов из локального хранилища по HTTP.

Файл целиком читается в память и отдаётся одним ответом
(без Range-запросов и стриминга) с долгим публичным кэшированием.

Коды ответа:
    200 — файл найден и прочитан
    400 — путь указывает не на обычный файл
    403 — путь выходит за пределы хранилища
    404 — файла нет
    500 — непредвиденная ошибка ввода-вывода
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ocr_gateway.config import settings
from ocr_gateway.errors import Forbidden
from ocr_gateway.services.resolver import guess_content_type
from ocr_gateway.services.storage import LocalObjectStore

logger = logging.getLogger(__name__)


@dataclass
class ServedFile:
    """
    Готовый HTTP ответ для файла.

    Attributes:
        status_code: HTTP статус
        body: тело ответа (содержимое файла или текст ошибки)
        headers: заголовки ответа
    """

    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)


def serve_file(
    store: LocalObjectStore,
    request_path: str,
    cache_max_age: Optional[int] = None,
) -> ServedFile:
    """
    Формирует ответ для GET /api/files/<path>.

    Args:
        store: хранилище, из которого раздаются файлы
        request_path: путь после /api/files/ (или /uploads/)
        cache_max_age: max-age для Cache-Control (по умолчанию settings.cache_max_age)

    Returns:
        ServedFile: статус, заголовки и тело ответа
    """
    if cache_max_age is None:
        cache_max_age = settings.cache_max_age

    try:
        path = store.locate(request_path)
    except Forbidden:
        logger.warning(f"Запрещённый путь: {request_path}")
        return _text(403, "Forbidden")

    try:
        if not path.exists():
            return _text(404, "File not found")
        if not path.is_file():
            return _text(400, "Not a file")

        content = path.read_bytes()
    except FileNotFoundError:
        return _text(404, "File not found")
    except Exception as e:
        logger.exception(f"Ошибка раздачи файла {request_path}: {e}")
        return _text(500, "Internal Server Error")

    return ServedFile(
        status_code=200,
        body=content,
        headers={
            "Content-Type": guess_content_type(path),
            "Content-Length": str(len(content)),
            "Cache-Control": f"public, max-age={cache_max_age}",
        },
    )


def _text(status_code: int, message: str) -> ServedFile:
    return ServedFile(
        status_code=status_code,
        body=message.encode("utf-8"),
        headers={"Content-Type": "text/plain; charset=utf-8"},
    )
