"""
Typed outcomes of backend calls and the single error shape exposed to callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class StoreStatus(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class StoreResult:
    status: StoreStatus
    value: Any = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None) -> "StoreResult":
        return cls(StoreStatus.OK, value)

    @classmethod
    def not_found(cls, message: str = "Post not found") -> "StoreResult":
        return cls(StoreStatus.NOT_FOUND, message=message)

    @classmethod
    def invalid(cls, message: str) -> "StoreResult":
        return cls(StoreStatus.INVALID, message=message)

    @classmethod
    def unavailable(cls, message: str) -> "StoreResult":
        return cls(StoreStatus.UNAVAILABLE, message=message)

    @classmethod
    def internal_error(cls, message: str) -> "StoreResult":
        return cls(StoreStatus.INTERNAL_ERROR, message=message)

    @property
    def is_ok(self) -> bool:
        return self.status is StoreStatus.OK

    def map(self, convert: Callable[[Any], Any]) -> "StoreResult":
        """Applies `convert` to the value of an OK result; other results pass through."""
        if not self.is_ok:
            return self
        return StoreResult.ok(convert(self.value))


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    UNSUPPORTED = "unsupported"
    INTERNAL = "internal"


class BlogApiError(Exception):
    """Error raised by the facade; `message` is safe to show to end users."""

    def __init__(
        self, kind: ErrorKind, message: str, details: Optional[dict] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"BlogApiError(kind={self.kind.value!r}, message={self.message!r})"
