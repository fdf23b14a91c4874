"""Column size limits for the authorization tables."""

from __future__ import annotations


class AuthDbConstants:
    # user_id and email carry unique indexes, so both stay well under the
    # 900-byte index key limit of the strictest supported backend.
    USER_ID_SIZE = 256
    EMAIL_SIZE = 256
    USER_NAME_SIZE = 128
    ROLE_NAME_SIZE = 100
    TENANT_NAME_SIZE = 100
    TENANT_DATA_KEY_SIZE = 100
