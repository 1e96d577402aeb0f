from typing import Optional


class ApiError(Exception):
    """Base for errors that map onto a ``{success: false, message}`` response."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class AuthError(ApiError):
    """Missing/invalid credentials (401) or insufficient role (403)."""

    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class StoreError(ApiError):
    status_code = 500
