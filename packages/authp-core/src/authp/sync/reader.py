"""Protocols for the external services the sync and bulk loader consume."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from authp.sync.changes import SyncAuthenticationUser


class SyncAuthenticationUsers(Protocol):
    """Reads the full, current set of active users from an authentication provider."""

    async def get_all_active_user_info(self) -> list[SyncAuthenticationUser]: ...


class FindUserIdService(Protocol):
    """Looks up a provider user id for a user defined without one."""

    async def find_user_id(self, unique_user_name: str) -> str | None: ...


class InMemoryIdentityReader:
    """Identity reader over a fixed list, for testing and development."""

    def __init__(self, users: Iterable[SyncAuthenticationUser] = ()) -> None:
        self._users = list(users)

    def set_users(self, users: Iterable[SyncAuthenticationUser]) -> None:
        self._users = list(users)

    async def get_all_active_user_info(self) -> list[SyncAuthenticationUser]:
        return list(self._users)

    async def find_user_id(self, unique_user_name: str) -> str | None:
        return next(
            (u.user_id for u in self._users if unique_user_name in (u.email, u.user_name)),
            None,
        )
