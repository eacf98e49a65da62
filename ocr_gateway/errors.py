"""
Ошибки OCR Gateway.

Каждая ошибка несёт машинный код (попадает в поле error_code ответов
хранилища и в detail.error HTTP ответов) и HTTP статус для маппинга
в эндпоинтах. Ошибки OCR провайдера сюда не входят: они пробрасываются
вызывающему без изменений.
"""


class GatewayError(Exception):
    """Базовая ошибка сервиса."""

    code = "unknown_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- Хранилище ---


class InvalidContentType(GatewayError):
    code = "invalid_content_type"
    status_code = 415


class SizeLimitExceeded(GatewayError):
    code = "size_limit_exceeded"
    status_code = 413


class Forbidden(GatewayError):
    """Путь выходит за пределы корня хранилища."""

    code = "forbidden"
    status_code = 403


class NotFound(GatewayError):
    code = "not_found"
    status_code = 404


class NotAFile(GatewayError):
    """Путь существует, но это не обычный файл (например, каталог)."""

    code = "not_a_file"
    status_code = 400


class UnknownIO(GatewayError):
    code = "unknown_io"
    status_code = 500


# --- OCR ---


class MissingInput(GatewayError):
    code = "missing_input"
    status_code = 400


class MissingCredential(GatewayError):
    code = "missing_credential"
    status_code = 500


class LocalFileUnreadable(GatewayError):
    code = "local_file_unreadable"
    status_code = 404
