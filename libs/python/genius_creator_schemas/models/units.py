"""Per-unit generation results.

A unit (one chapter body or one cover image) either succeeds with ``Ok`` or
falls back to a usable value with ``Degraded``. Callers branch on
``result.degraded`` instead of inspecting placeholder text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def degraded(self) -> bool:
        return False

    @property
    def cause(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class Degraded(Generic[T]):
    value: T
    reason: str

    @property
    def degraded(self) -> bool:
        return True

    @property
    def cause(self) -> str:
        return self.reason


UnitResult = Union[Ok[T], Degraded[T]]
