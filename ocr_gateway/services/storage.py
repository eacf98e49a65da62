"""
Локальное хранилище загруженных файлов.

Файлы лежат на томе, примонтированном в контейнер:
    <root>/<папка>/<файл>

Особенности:
    - Метаданных нет: всё, что известно о файле, берётся из файловой системы
    - Повторная запись с тем же именем перезаписывает файл
    - Блокировок нет: при гонке удаления и чтения чтение получает NotFound
    - Любой путь от клиента проверяется на выход за пределы корня
"""

import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional, Union

from ocr_gateway.errors import (
    Forbidden,
    InvalidContentType,
    NotAFile,
    NotFound,
    SizeLimitExceeded,
    UnknownIO,
)
from ocr_gateway.schemas import StoredObject
from ocr_gateway.services.resolver import (
    guess_content_type,
    resolve,
    to_public_path,
    to_relative,
)

logger = logging.getLogger(__name__)


class LocalObjectStore:
    """
    Хранилище байтовых файлов под корневым каталогом.

    Корень передаётся явно при создании, поэтому в тестах каждый
    экземпляр работает со своим временным каталогом.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def locate(self, key: str) -> Path:
        """
        Абсолютный путь файла по ключу без проверки существования.

        Args:
            key: /uploads/..., /api/files/... или путь относительно корня

        Raises:
            Forbidden: путь выходит за пределы корня
        """
        return resolve(self.root, to_relative(key))

    def put(
        self,
        content: bytes,
        content_type: str,
        original_name: str,
        folder_name: str,
        file_name: Optional[str] = None,
        allowed_content_types: Iterable[str] = (),
        max_size_bytes: int = 0,
    ) -> str:
        """
        Сохраняет файл и возвращает его публичный путь.

        Порядок проверок:
            1. Content-Type входит в allowed_content_types
            2. Размер не больше max_size_bytes
            3. Папка и файл остаются внутри корня
        Только после всех проверок создаётся папка и пишется файл.

        Args:
            content: содержимое файла
            content_type: заявленный клиентом MIME тип
            original_name: исходное имя файла у клиента
            folder_name: папка назначения (создаётся при отсутствии)
            file_name: явное имя; если не задано — <uuid4>_<original_name>
            allowed_content_types: допустимые MIME типы
            max_size_bytes: предельный размер в байтах

        Returns:
            str: публичный путь /uploads/<папка>/<файл>

        Raises:
            InvalidContentType, SizeLimitExceeded, Forbidden, UnknownIO
        """
        allowed = set(allowed_content_types)
        if content_type not in allowed:
            raise InvalidContentType(
                f"Недопустимый тип файла: {content_type or 'не указан'}, "
                f"разрешены: {', '.join(sorted(allowed))}"
            )

        if len(content) > max_size_bytes:
            raise SizeLimitExceeded(
                f"Файл слишком большой: {len(content)} байт, "
                f"максимум: {max_size_bytes} байт"
            )

        folder_path = resolve(self.root, folder_name)
        name = _safe_name(file_name or f"{uuid.uuid4()}_{_basename(original_name) or 'file'}")
        target = resolve(self.root, (PurePosixPath(folder_name.lstrip("/")) / name).as_posix())

        try:
            folder_path.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            logger.exception(f"Ошибка записи файла {target}: {e}")
            raise UnknownIO(f"Не удалось сохранить файл: {name}") from e

        public_path = to_public_path(folder_path.relative_to(self.root).as_posix(), name)
        logger.info(f"Файл сохранён: {target} ({len(content)} байт), url={public_path}")
        return public_path

    def get(self, key: str) -> StoredObject:
        """
        Читает файл по ключу.

        Args:
            key: /uploads/..., /api/files/... или путь относительно корня

        Returns:
            StoredObject: содержимое, MIME тип и размер

        Raises:
            Forbidden: путь выходит за пределы корня
            NotFound: файла нет или это не обычный файл
            UnknownIO: прочие ошибки чтения
        """
        path = self.locate(key)
        if not path.is_file():
            raise NotFound(f"Файл не найден: {key}")

        try:
            content = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise NotFound(f"Файл не найден: {key}") from e
        except OSError as e:
            logger.exception(f"Ошибка чтения файла {path}: {e}")
            raise UnknownIO(f"Не удалось прочитать файл: {key}") from e

        return StoredObject(
            folder_name=path.parent.relative_to(self.root).as_posix(),
            file_name=path.name,
            content=content,
            content_type=guess_content_type(path),
            size_bytes=len(content),
        )

    def delete(self, key: str) -> None:
        """
        Удаляет файл по ключу.

        Raises:
            Forbidden: путь выходит за пределы корня
            NotFound: файла нет или это не обычный файл
            UnknownIO: прочие ошибки удаления
        """
        path = self.locate(key)
        if not path.is_file():
            raise NotFound(f"Файл не найден: {key}")

        try:
            path.unlink()
        except FileNotFoundError as e:
            # Файл удалён параллельным запросом между проверкой и unlink
            raise NotFound(f"Файл не найден: {key}") from e
        except OSError as e:
            logger.exception(f"Ошибка удаления файла {path}: {e}")
            raise UnknownIO(f"Не удалось удалить файл: {key}") from e

        logger.info(f"Файл удалён: {path}")

    def list(self, folder_prefix: str) -> list[str]:
        """
        Список файлов папки (без подпапок и без рекурсии).

        Args:
            folder_prefix: папка относительно корня (или с префиксом /uploads/)

        Returns:
            list[str]: отсортированные пути <папка>/<файл>;
                пустой список, если папки нет

        Raises:
            Forbidden: путь выходит за пределы корня
            NotAFile: путь указывает на файл, а не на папку
            UnknownIO: прочие ошибки чтения каталога
        """
        folder_path = self.locate(folder_prefix)
        if not folder_path.exists():
            return []
        if not folder_path.is_dir():
            raise NotAFile(f"Не является папкой: {folder_prefix}")

        folder = PurePosixPath(folder_path.relative_to(self.root).as_posix())
        try:
            entries = sorted(folder_path.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.exception(f"Ошибка чтения каталога {folder_path}: {e}")
            raise UnknownIO(f"Не удалось прочитать папку: {folder_prefix}") from e

        return [(folder / entry.name).as_posix() for entry in entries if entry.is_file()]


def _basename(name: str) -> str:
    # Браузеры на Windows присылают полный путь с обратными слэшами
    return PurePosixPath(name.replace("\\", "/")).name


def _safe_name(name: str) -> str:
    base = _basename(name)
    if base in ("", ".", ".."):
        raise Forbidden(f"Недопустимое имя файла: {name!r}")
    return base
