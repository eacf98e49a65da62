"""
Конфигурация OCR Gateway.

Все значения читаются из .env файла (или переменных окружения).
Префикс: OCR_. Для совместимости с существующими развёртываниями
корень хранилища также читается из UPLOAD_DIR, а ключ API — из MISTRAL_API_KEY.

Документация по параметрам: .env.example
"""

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Настройки OCR Gateway.

    Читает переменные с префиксом OCR_ из .env файла.
    Объединяет параметры хранилища, раздачи файлов и OCR провайдера.
    """

    model_config = SettingsConfigDict(
        env_prefix="OCR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # --- Сервер ---
    port: int = 8000

    # --- Хранилище ---
    # Корень локального хранилища (том, примонтированный в контейнер)
    upload_dir: Path = Field(
        default=Path("/app/uploads"),
        validation_alias=AliasChoices("OCR_UPLOAD_DIR", "UPLOAD_DIR"),
    )
    max_file_size_mb: int = 100

    # --- Раздача файлов ---
    # Cache-Control: public, max-age=<cache_max_age> (по умолчанию 1 год)
    cache_max_age: int = 31536000

    # --- OCR провайдер ---
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OCR_API_KEY", "MISTRAL_API_KEY"),
    )
    ocr_model: str = "mistral-ocr-latest"

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


# Глобальный экземпляр настроек
settings = Settings()
