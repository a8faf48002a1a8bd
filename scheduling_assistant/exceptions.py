"""Error taxonomy shared by services and the HTTP layer."""

from typing import Any


class SchedulingError(Exception):
    """Base class for errors surfaced to API callers as structured responses."""

    code = "error"
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class InputValidationError(SchedulingError):
    """Malformed input rejected before any state change."""

    code = "validation-error"
    status_code = 422


class NotFoundError(SchedulingError):
    code = "not-found"
    status_code = 404


class SlotNotFoundError(NotFoundError):
    """No slot matches the requested id or start time."""


class SlotConflictError(SchedulingError):
    """The slot exists but is no longer open."""

    code = "conflict"
    status_code = 409


class UpstreamError(SchedulingError):
    """Persistence layer or LLM API unreachable or erroring."""

    code = "upstream-failure"
    status_code = 502


class LLMOutputError(UpstreamError):
    """The model kept returning output that fails the declared schema."""

    def __init__(self, operation: str, attempts: int, last_error: str):
        super().__init__(
            f"LLM output for '{operation}' failed validation after {attempts} attempts",
            details={"operation": operation, "attempts": attempts, "last_error": last_error},
        )
        self.operation = operation
        self.attempts = attempts
