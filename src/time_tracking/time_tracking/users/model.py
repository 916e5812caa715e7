from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """Domain entity: the employee a session belongs to.

    Note: plain data object; account and role management live elsewhere.
    """

    user_id: int
    full_name: str
    is_active: bool = True
