from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ResultStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class Result(Generic[T]):
    """Outcome of a read that never raises; `value` is always usable"""

    status: ResultStatus
    value: T
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(ResultStatus.OK, value)

    @classmethod
    def empty(cls, value: T) -> "Result[T]":
        return cls(ResultStatus.EMPTY, value)

    @classmethod
    def failed(cls, value: T, error: str) -> "Result[T]":
        return cls(ResultStatus.FAILED, value, error)

    @property
    def is_ok(self) -> bool:
        return self.status is ResultStatus.OK

    @property
    def is_failed(self) -> bool:
        return self.status is ResultStatus.FAILED
