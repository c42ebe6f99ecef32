from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    FILE_TOO_LARGE = "file_too_large"
    READ_FAILED = "read_failed"
    CONFLICTING_MODIFICATION = "conflicting_modification"
    PERMISSION_DENIED = "permission_denied"
    INTERNAL_FAULT = "internal_fault"


@dataclass(frozen=True)
class Failure:
    """A refused request: what went wrong and the message shown to the user."""

    kind: ErrorKind
    message: str


class HintError(Exception):
    """Raised by collaborators when they have a message fit for the end user."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint or message
