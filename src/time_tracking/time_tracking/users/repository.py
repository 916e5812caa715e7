from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Lookup contract used to reject clock actions for unknown users."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError
