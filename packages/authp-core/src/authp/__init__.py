"""authp - authorization users admin and authentication-provider sync."""

__all__ = ["AuthPermissionsOptions", "AuthUsersAdminService", "Status"]
__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports so callers that only need options don't load SQLAlchemy."""
    if name == "AuthPermissionsOptions":
        from authp.config import AuthPermissionsOptions

        return AuthPermissionsOptions
    if name == "AuthUsersAdminService":
        from authp.admin.users import AuthUsersAdminService

        return AuthUsersAdminService
    if name == "Status":
        from authp.status import Status

        return Status
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
