"""
Error types and the uniform result returned by assistant operations
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    UNEXPECTED = "unexpected"


class ConfigurationError(RuntimeError):
    """Raised at initialization when the process cannot talk to a backend."""


class TransportError(RuntimeError):
    """A backend call failed: non-2xx status, network failure or SDK error."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass
class Result(Generic[T]):
    """Outcome of an operation. On failure ``value`` holds the fallback value."""

    value: T
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, value: T, error: ErrorKind, detail: Optional[str] = None) -> "Result[T]":
        return cls(value=value, error=error, detail=detail)
