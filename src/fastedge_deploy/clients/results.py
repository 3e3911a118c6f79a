"""Outcome of a name lookup.

A lookup that matches nothing is an expected branch for the deployment flows
(it means "create"), so it is returned rather than raised.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    resource: T


@dataclass(frozen=True)
class NotFound:
    name: str


LookupResult = Found[T] | NotFound
