"""Operation outcomes for repository calls."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ResultStatus(str, Enum):
    ok = "ok"
    not_found = "not_found"
    # Record matched but the write changed nothing
    unchanged = "unchanged"
    rejected = "rejected"
    error = "error"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    status: ResultStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.ok

    def unwrap_or(self, default: Any) -> Any:
        """Return the value on success, `default` for every other status."""
        return self.value if self.ok else default

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ResultStatus.ok, value)

    @classmethod
    def missing(cls) -> "OperationResult":
        return cls(ResultStatus.not_found)

    @classmethod
    def no_change(cls) -> "OperationResult":
        return cls(ResultStatus.unchanged)

    @classmethod
    def reject(cls, reason: str) -> "OperationResult":
        return cls(ResultStatus.rejected, error=reason)

    @classmethod
    def failure(cls, exc: BaseException) -> "OperationResult":
        return cls(ResultStatus.error, error=str(exc))
