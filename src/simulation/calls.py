from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

from dispatch import CallView, Direction

from .user import User

CallKey = Tuple[int, Direction]


@dataclass
class CallRequest:
    """A hall call raised by a waiting user."""

    floor: int
    direction: Direction
    user: User
    raised_at: float

    @property
    def key(self) -> CallKey:
        return (self.floor, self.direction)

    def view(self) -> CallView:
        return CallView(
            floor=self.floor,
            direction=self.direction,
            user=self.user.view(),
            raised_at=self.raised_at,
        )


class CallBoard:
    """Pending hall calls, at most one per floor and direction.

    A call retired with ``carry_over`` remembers when it was first raised,
    so the users left behind keep their place when they press again.
    """

    def __init__(self) -> None:
        self._calls: Dict[CallKey, CallRequest] = {}
        self._carried: Dict[CallKey, float] = {}

    def raise_call(self, user: User, current_time: float) -> CallRequest:
        key = (user.origin_floor, user.direction)
        existing = self._calls.get(key)
        if existing is not None:
            return existing
        call = CallRequest(
            floor=user.origin_floor,
            direction=user.direction,
            user=user,
            raised_at=self._carried.pop(key, current_time),
        )
        self._calls[key] = call
        return call

    def retire(self, floor: int, direction: Direction, carry_over: bool = False) -> bool:
        key = (floor, direction)
        call = self._calls.pop(key, None)
        if not carry_over:
            self._carried.pop(key, None)
        elif call is not None:
            self._carried[key] = call.raised_at
        return call is not None

    def covers(self, user: User) -> bool:
        return (user.origin_floor, user.direction) in self._calls

    def views(self) -> Tuple[CallView, ...]:
        return tuple(call.view() for call in self._calls.values())

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self) -> Iterator[CallRequest]:
        return iter(list(self._calls.values()))
