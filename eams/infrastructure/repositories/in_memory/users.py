"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/users.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Store users in memory (tests / local dev).
  - Enforce email uniqueness atomically (exact match, case-sensitive).

Collaborators:
  - identity.users.User
  - domain.repositories.UserRepository

Constraints:
  - Thread-safe: every access under a Lock.
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Optional
from uuid import UUID

from ....domain.repositories import UserRepository
from ....identity.users import User


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, User] = {}
        self._by_email: Dict[str, UUID] = {}

    def add_user(self, user: User) -> bool:
        with self._lock:
            if user.email in self._by_email:
                return False
            self._users[user.id] = user
            self._by_email[user.email] = user.id
            return True

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user_id = self._by_email.get(email)
            return self._users.get(user_id) if user_id else None

    def count_users(self) -> int:
        with self._lock:
            return len(self._users)
