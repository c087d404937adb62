from __future__ import annotations


class RecipeShareError(Exception):
    """Base error raised by the services. ``status_code`` is what the API returns."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(RecipeShareError):
    status_code = 404


class ForbiddenError(RecipeShareError):
    status_code = 403


class ConflictError(RecipeShareError):
    status_code = 400


class DuplicateEmailError(ConflictError):
    status_code = 409


class UnauthorizedError(RecipeShareError):
    status_code = 401
