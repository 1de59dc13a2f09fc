from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List

from .user import User


@dataclass
class Floor:
    """Represents a floor with its first-in, first-out waiting list."""

    number: int
    waiting: Deque[User] = field(default_factory=deque)
    in_transit: int = 0

    def add_user(self, user: User) -> None:
        self.waiting.append(user)

    def remove_user(self, user: User) -> bool:
        try:
            self.waiting.remove(user)
        except ValueError:
            return False
        return True

    def eligible(self, predicate: Callable[[User], bool]) -> List[User]:
        """Waiting users accepted by ``predicate``, in queue order."""
        return [user for user in self.waiting if predicate(user)]

    def __len__(self) -> int:
        return len(self.waiting)
