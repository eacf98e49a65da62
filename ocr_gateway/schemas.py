"""
Схемы данных OCR Gateway.

Включает:
    - Pydantic модели ответов операций хранилища (ровно одно из полей
      результат/ошибка заполнено)
    - Pydantic модель запроса OCR для API
    - Внутренние dataclass'ы: сохранённый объект и запрос к OCR провайдеру
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ocr_gateway.errors import GatewayError


# =============================================================================
# Pydantic модели для API
# =============================================================================


class UploadResult(BaseModel):
    """
    Результат загрузки файла.

    Attributes:
        url: публичный путь /uploads/<папка>/<файл> (при успехе)
        error: сообщение об ошибке (при неудаче)
        error_code: машинный код ошибки (при неудаче)
    """

    url: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "UploadResult":
        if (self.url is None) == (self.error is None):
            raise ValueError("Должно быть заполнено ровно одно из полей: url или error")
        if self.error is None and self.error_code is not None:
            raise ValueError("error_code допустим только вместе с error")
        return self

    @classmethod
    def failed(cls, exc: GatewayError) -> "UploadResult":
        return cls(error=exc.message, error_code=exc.code)


class DeleteResult(BaseModel):
    """
    Результат удаления файла.

    Attributes:
        success: файл удалён
        error: сообщение об ошибке (если success=False)
        error_code: машинный код ошибки (если success=False)
    """

    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "DeleteResult":
        if self.success == (self.error is not None):
            raise ValueError("success=True несовместим с error, success=False требует error")
        if self.error is None and self.error_code is not None:
            raise ValueError("error_code допустим только вместе с error")
        return self

    @classmethod
    def failed(cls, exc: GatewayError) -> "DeleteResult":
        return cls(success=False, error=exc.message, error_code=exc.code)


class ListResult(BaseModel):
    """
    Результат листинга папки.

    Attributes:
        files: относительные пути файлов (<папка>/<файл>)
        error: сообщение об ошибке (files при этом пустой)
        error_code: машинный код ошибки
    """

    files: list[str] = []
    error: Optional[str] = None
    error_code: Optional[str] = None

    @model_validator(mode="after")
    def _no_files_on_error(self) -> "ListResult":
        if self.error is not None and self.files:
            raise ValueError("При ошибке список файлов должен быть пустым")
        if self.error is None and self.error_code is not None:
            raise ValueError("error_code допустим только вместе с error")
        return self

    @classmethod
    def failed(cls, exc: GatewayError) -> "ListResult":
        return cls(files=[], error=exc.message, error_code=exc.code)


class OCRRequestBody(BaseModel):
    """
    Тело запроса на OCR.

    Attributes:
        source: https:// URL или путь в локальном хранилище (/uploads/...)
        include_image_base64: вернуть изображения внутри ответа провайдера
    """

    source: str = Field(
        ...,
        description="https:// URL или путь файла: /uploads/pdfs/<файл>.pdf",
    )
    include_image_base64: bool = Field(
        default=True,
        description="Включить base64 изображений в ответ провайдера",
    )


# =============================================================================
# Внутренние структуры
# =============================================================================


class OCRKind(str, Enum):
    """Тип источника для провайдера: документ (PDF) или отдельное изображение."""

    DOCUMENT = "document"
    IMAGE = "image"


@dataclass
class OCRRequest:
    """
    Запрос к OCR провайдеру.

    Attributes:
        source: https:// URL или ключ локального хранилища
        include_image_base64: флаг включения изображений в ответ
        kind: документ или изображение
    """

    source: str
    include_image_base64: bool = True
    kind: OCRKind = OCRKind.DOCUMENT


@dataclass
class StoredObject:
    """
    Файл в локальном хранилище.

    Attributes:
        folder_name: папка относительно корня (может быть вложенной)
        file_name: имя файла
        content: содержимое
        content_type: MIME тип по расширению
        size_bytes: размер в байтах
    """

    folder_name: str
    file_name: str
    content: bytes
    content_type: str
    size_bytes: int
