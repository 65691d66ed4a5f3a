"""Result values for operations that degrade instead of failing.

The engine never lets a filesystem error cross its public boundary. Internally
each fallible step still reports what happened, so a degraded result is visible
in logs and tests rather than being an accidental swallow.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar, Union

T = TypeVar('T')


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    reason: str


@dataclass(frozen=True)
class Resolved:
    path: Path


@dataclass(frozen=True)
class Rejected:
    reason: str


Outcome = Union[Ok[T], Degraded[T]]
Resolution = Union[Resolved, Rejected]
