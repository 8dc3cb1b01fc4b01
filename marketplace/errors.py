"""
Иерархия ошибок приложения.
Каждая ошибка несет HTTP-статус и сообщение для пользователя.
"""
from typing import List, Optional


class MarketplaceError(Exception):
    """Базовая ошибка приложения"""
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(MarketplaceError):
    """Входные данные не прошли проверку схемы"""
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__(", ".join(self.messages) or self.default_message)


class AuthenticationRequired(MarketplaceError):
    status_code = 401
    default_message = "You must be logged in first!"


class InvalidCredentials(MarketplaceError):
    status_code = 401
    default_message = "Invalid username or password"


class AuthorizationDenied(MarketplaceError):
    status_code = 403
    default_message = "You don't have permission to do that"

    def __init__(self, message: Optional[str] = None, redirect_to: str = "/listings"):
        self.redirect_to = redirect_to
        super().__init__(message)


class NotFound(MarketplaceError):
    status_code = 404
    default_message = "Listing does not exist"


class DuplicateIdentity(MarketplaceError):
    status_code = 409
    default_message = "A user with the given username or email is already registered"


class PersistenceError(MarketplaceError):
    status_code = 500
    default_message = "Database operation failed"


class ExternalServiceError(MarketplaceError):
    status_code = 502
    default_message = "External service unavailable"
