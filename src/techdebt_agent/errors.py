from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCategory(str, Enum):
    FILESYSTEM = "filesystem"
    PERMISSION = "permission"
    VALIDATION = "validation"
    ANALYSIS = "analysis"
    CONFIGURATION = "configuration"


class TechDebtError(Exception):
    """A categorized failure.

    Recoverable errors are collected during a scan and reported as warnings;
    anything else ends the scan and becomes the tool's error response.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        recoverable: bool = False,
        context: Optional[Dict[str, Any]] = None,
        file_path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.recoverable = recoverable
        self.context = context
        self.file_path = file_path

    def __repr__(self) -> str:
        return (
            f"TechDebtError({self.message!r}, category={self.category.value}, "
            f"recoverable={self.recoverable})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TechDebtError):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = Exception.__hash__

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "message": self.message,
            "category": self.category.value,
            "recoverable": self.recoverable,
        }
        if self.context is not None:
            data["context"] = self.context
        if self.file_path is not None:
            data["filePath"] = self.file_path
        return data


def validation_error(message: str, **context: Any) -> TechDebtError:
    return TechDebtError(message, ErrorCategory.VALIDATION, recoverable=False, context=context or None)


def os_error_category(exc: OSError) -> ErrorCategory:
    if isinstance(exc, PermissionError):
        return ErrorCategory.PERMISSION
    return ErrorCategory.FILESYSTEM


@dataclass(frozen=True)
class Result(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[TechDebtError] = None

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        return cls(True, data=data)

    @classmethod
    def fail(cls, error: TechDebtError) -> "Result[T]":
        return cls(False, error=error)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]
