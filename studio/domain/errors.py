"""Domain error codes for the studio module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_STATE = "INVALID_STATE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION = "VALIDATION"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, identifier: object = None) -> None:
        message = f"{entity} not found"
        if identifier is not None:
            message = f"{entity} with id {identifier} not found"
        super().__init__(code=ErrorCode.NOT_FOUND, message=message)


class ConflictError(DomainError):
    """Raised on duplicate registrations or repeated attendance marking."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.CONFLICT, message=message)


class InvalidStateError(DomainError):
    """Raised when a business rule forbids the operation in the current state."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_STATE) -> None:
        super().__init__(code=code, message=message)


class CapacityExceededError(InvalidStateError):
    """Raised when an occurrence has no seats left."""

    def __init__(self, message: str = "Occurrence has reached maximum capacity") -> None:
        super().__init__(message, code=ErrorCode.CAPACITY_EXCEEDED)


class ValidationError(InvalidStateError):
    """Raised when input is malformed (time of day, metrics, recurrence rule)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION)


class InvalidIdError(ValidationError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, entity: str = "entity") -> None:
        super().__init__(f"Invalid {entity} ID format")


class ForbiddenError(DomainError):
    """Raised when a subject mutates or reads a resource it does not own."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)
