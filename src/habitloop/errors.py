"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

from typing import Any, Mapping


class HabitLoopError(Exception):
    """Base class for every error the application raises on purpose.

    ``client_error`` separates bad input from server faults; the HTTP layer
    surfaces the message verbatim only for client errors.
    """

    code = "HABITLOOP_ERROR"
    status_code = 500
    client_error = False

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": False,
            "code": self.code,
            "kind": "client" if self.client_error else "server",
            "message": self.message,
        }
        if self.details:
            payload["errors"] = self.details
        return payload


class InvalidDateFormat(HabitLoopError, ValueError):
    code = "INVALID_DATE_FORMAT"
    status_code = 400
    client_error = True


class ScheduleValidationError(HabitLoopError, ValueError):
    code = "SCHEDULE_VALIDATION_ERROR"
    status_code = 400
    client_error = True


class ScheduleComputationError(HabitLoopError):
    code = "SCHEDULE_COMPUTATION_ERROR"
    status_code = 500
    client_error = False


class FutureDateError(HabitLoopError, ValueError):
    code = "FUTURE_DATE"
    status_code = 400
    client_error = True


class NotFoundError(HabitLoopError, LookupError):
    code = "NOT_FOUND"
    status_code = 404
    client_error = True


class PermissionDeniedError(HabitLoopError):
    code = "FORBIDDEN"
    status_code = 403
    client_error = True


class ConflictError(HabitLoopError):
    code = "CONFLICT"
    status_code = 409
    client_error = True


class AuthenticationRequired(HabitLoopError):
    code = "UNAUTHENTICATED"
    status_code = 401
    client_error = True


class RequestValidationError(HabitLoopError, ValueError):
    """Raised when a request body fails its pydantic form."""

    code = "VALIDATION_ERROR"
    status_code = 400
    client_error = True


__all__ = [
    "AuthenticationRequired",
    "ConflictError",
    "FutureDateError",
    "HabitLoopError",
    "InvalidDateFormat",
    "NotFoundError",
    "PermissionDeniedError",
    "RequestValidationError",
    "ScheduleComputationError",
    "ScheduleValidationError",
]
