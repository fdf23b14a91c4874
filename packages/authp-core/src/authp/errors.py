"""Exceptions that cross the authp public boundary.

Recoverable problems (bad input, unknown role/tenant, duplicate keys) are
reported through :class:`authp.status.Status` instead of being raised.
"""


class AuthPermissionsError(Exception):
    """Setup or invariant failure, e.g. no sync reader registered or a
    change record whose user vanished from the store mid-sync."""
    pass


class AuthPermissionsBadDataError(ValueError):
    """A caller passed data that breaks an operation's precondition.

    Attributes:
        param_name: name of the offending argument
    """

    def __init__(self, message: str, param_name: str | None = None):
        self.param_name = param_name
        detail = f"{message} (parameter: {param_name})" if param_name else message
        super().__init__(detail)
