"""Identity reader adapters for the authentication provider."""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import BaseModel, TypeAdapter

from authp.sync.changes import SyncAuthenticationUser

log = structlog.get_logger(__name__)


class IdentityRecord(BaseModel):
    user_id: str
    email: str
    user_name: str | None = None


_records_adapter = TypeAdapter(list[IdentityRecord])


class JsonFileIdentityReader:
    """Reads the provider's active users from an exported JSON file.

    The file is re-read on every call so each sync sees a full, fresh snapshot.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    async def get_all_active_user_info(self) -> list[SyncAuthenticationUser]:
        records = _records_adapter.validate_json(self._path.read_bytes())
        log.debug("identity_file_read", path=str(self._path), users=len(records))
        return [
            SyncAuthenticationUser(user_id=r.user_id, email=r.email, user_name=r.user_name)
            for r in records
        ]


def build_identity_reader(path: str | None) -> JsonFileIdentityReader | None:
    """Return a reader for ``path``, or None when no identity source is configured."""
    if not path:
        return None
    return JsonFileIdentityReader(path)
