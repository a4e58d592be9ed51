"""
Lifecycle of asynchronously obtained data.

A value fetched from the API is always in one of four states:
- NotAsked: nobody requested it yet.
- Loading: a request is in flight.
- Success: the value arrived and decoded.
- Failure: the request or the decoding failed.

The NotAsked/Loading distinction is what keeps us from issuing the same fetch twice.
"""
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class NotAsked:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: Any


RemoteSlot = Union[NotAsked, Loading, Success, Failure]

NOT_ASKED = NotAsked()
LOADING = Loading()


def value_or_none(slot: RemoteSlot) -> Optional[Any]:
    return slot.value if isinstance(slot, Success) else None
