"""Authentication-provider sync: comparison records and reader protocols."""

from __future__ import annotations

from authp.sync.changes import SyncAuthenticationUser, SyncAuthUserChanges, SyncAuthUserWithChange
from authp.sync.reader import FindUserIdService, InMemoryIdentityReader, SyncAuthenticationUsers

__all__ = [
    "FindUserIdService",
    "InMemoryIdentityReader",
    "SyncAuthUserChanges",
    "SyncAuthUserWithChange",
    "SyncAuthenticationUser",
    "SyncAuthenticationUsers",
]
