"""
Преобразование публичных путей файлов в пути на диске и обратно.

Публичный путь: /uploads/<папка>/<файл>. Хостинг переписывает его
на внутренний маршрут /api/files/<папка>/<файл>, поэтому оба префикса
взаимозаменяемы и снимаются одинаково.

Любой путь, пришедший от клиента, разрешается относительно корня
хранилища и обязан остаться внутри него (защита от ../ и симлинков).
"""

import mimetypes
from pathlib import Path, PurePosixPath

from ocr_gateway.errors import Forbidden

PUBLIC_PREFIX = "/uploads/"
FILES_ROUTE_PREFIX = "/api/files/"

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def to_relative(key: str) -> str:
    """
    Снимает публичный (/uploads/) или внутренний (/api/files/) префикс.

    Ведущие слэши отбрасываются: ключ всегда трактуется относительно
    корня хранилища.

    Args:
        key: публичный путь, путь внутреннего маршрута или относительный путь

    Returns:
        str: путь относительно корня хранилища
    """
    for prefix in (PUBLIC_PREFIX, FILES_ROUTE_PREFIX):
        if key.startswith(prefix):
            key = key[len(prefix):]
            break
    return key.lstrip("/")


def to_public_path(folder_name: str, file_name: str) -> str:
    """Собирает публичный путь /uploads/<папка>/<файл>."""
    relative = PurePosixPath(folder_name.strip("/")) / file_name
    return f"{PUBLIC_PREFIX}{relative.as_posix()}"


def get_public_url(path: str) -> str:
    """Публичный URL файла: пути с /uploads возвращаются как есть."""
    return path if path.startswith("/uploads") else f"{PUBLIC_PREFIX}{path.lstrip('/')}"


def resolve(root: Path, relative: str) -> Path:
    """
    Разрешает относительный путь внутри корня хранилища.

    Args:
        root: корень хранилища (уже разрешённый через Path.resolve)
        relative: путь относительно корня

    Returns:
        Path: абсолютный путь внутри корня

    Raises:
        Forbidden: если путь выходит за пределы корня
    """
    try:
        candidate = (root / relative.lstrip("/")).resolve()
    except (OSError, ValueError) as e:
        # ValueError — нулевой байт в пути
        raise Forbidden(f"Недопустимый путь: {relative!r}") from e

    if candidate != root and not candidate.is_relative_to(root):
        raise Forbidden(f"Путь выходит за пределы хранилища: {relative!r}")

    return candidate


def guess_content_type(path: Path) -> str:
    """MIME тип по расширению файла, application/octet-stream если неизвестен."""
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or DEFAULT_CONTENT_TYPE
