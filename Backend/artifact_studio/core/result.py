# artifact_studio/core/result.py
"""
Explicit per-step outcome: Ok(value) | Err(GenerationError).

A step that can fail returns a Result instead of raising, so the caller
decides at one visible point how the error case degrades.
"""
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from .exceptions import GenerationError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        return Ok(fn(self.value))

    def unwrap_or_else(self, fn: Callable[[GenerationError], T]) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: GenerationError

    def is_ok(self) -> bool:
        return False

    def map(self, fn: Callable) -> "Err":
        return self

    def unwrap_or_else(self, fn: Callable[[GenerationError], T]) -> T:
        return fn(self.error)


Result = Union[Ok[T], Err]
