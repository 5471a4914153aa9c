from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    STORAGE_FAILURE = "storage_failure"
    ILLEGAL_STATE = "illegal_state"    # ex: /add_set sans séance active
    CANCELLED = "cancelled"            # l'utilisateur a répondu non / /cancel


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    usage: Optional[str] = None
    conflict_with: Any = None          # Session en collision (ErrorKind.CONFLICT)

    @property
    def ok(self) -> bool:
        return False

    def with_usage(self, usage: Optional[str]) -> "Err":
        if self.usage or not usage:
            return self
        return Err(self.kind, self.message, usage, self.conflict_with)


Result = Union[Ok[T], Err]


def invalid(message: str, usage: Optional[str] = None) -> Err:
    return Err(ErrorKind.INVALID_ARGUMENT, message, usage)


def not_found(message: str, usage: Optional[str] = None) -> Err:
    return Err(ErrorKind.NOT_FOUND, message, usage)


def cancelled(message: str = "Action cancelled.") -> Err:
    return Err(ErrorKind.CANCELLED, message)
