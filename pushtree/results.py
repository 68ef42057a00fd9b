"""
results.py

Responsibility: Tagged result values returned by every forge API call.

A call either succeeds with `Ok(value)` or fails with `Err(kind, message, body)`.
Callers branch on `isinstance(result, Err)` instead of catching exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

# Error kinds
AUTH = "auth"
HTTP = "http"
NETWORK = "network"
NOT_FOUND = "not_found"
CONFLICT = "conflict"
VALIDATION = "validation"
EMPTY = "empty"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: str
    message: str
    body: Any = None


Result = Union[Ok[T], Err]
