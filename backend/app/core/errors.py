"""Error hierarchy for the employee directory.

Every error carries a machine-readable code, a category and the HTTP status
the API answers with. Malformed optional query input is never an error: it is
normalized away before it reaches the engine.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    STORE = "store"
    DATA_QUALITY = "data_quality"
    NOT_FOUND = "not_found"


class DirectoryError(Exception):
    """Base exception for all directory failures."""

    def __init__(self, message: str, code: str, category: ErrorCategory, http_status: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
            }
        }


class StoreUnavailableError(DirectoryError):
    """The record store could not serve a read (not configured, unreachable, timed out)."""

    def __init__(self, message: str = "Employee store is unavailable") -> None:
        super().__init__(message, "STORE_UNAVAILABLE", ErrorCategory.STORE, 503)


class ProjectionError(DirectoryError):
    """A stored record violates the projection rules, e.g. an empty name."""

    def __init__(self, message: str, empno: str | None = None) -> None:
        super().__init__(message, "PROJECTION_ERROR", ErrorCategory.DATA_QUALITY, 500)
        self.empno = empno


class EmployeeNotFoundError(DirectoryError):
    def __init__(self, empno: str) -> None:
        super().__init__(f"Employee '{empno}' not found", "EMPLOYEE_NOT_FOUND", ErrorCategory.NOT_FOUND, 404)
        self.empno = empno
