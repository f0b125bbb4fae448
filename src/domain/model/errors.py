"""Domain-level exceptions.

Services raise these errors to express business rule violations.
The API layer maps each kind to an HTTP status code and the response envelope.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class DomainError(Exception):
    """Base class for all domain errors."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Input violates one or more validation rules.

    Keeps every individual violation; the message is their comma-joined text.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, messages: list[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__(", ".join(self.messages))


class AuthError(DomainError):
    """Caller could not be authenticated. Never says which credential was wrong."""

    kind = ErrorKind.AUTH


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainError):
    """Entity with the same unique key already exists."""

    kind = ErrorKind.CONFLICT
