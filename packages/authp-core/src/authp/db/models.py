"""SQLAlchemy ORM models for the authorization store."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text, cast, func
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import DeclarativeBase, relationship

from authp.db.constants import AuthDbConstants


class Base(DeclarativeBase):
    pass


user_to_roles = Table(
    "user_to_roles",
    Base.metadata,
    Column(
        "user_id",
        String(AuthDbConstants.USER_ID_SIZE),
        ForeignKey("auth_users.user_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_name",
        String(AuthDbConstants.ROLE_NAME_SIZE),
        ForeignKey("role_to_permissions.role_name", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class RoleToPermissions(Base):
    __tablename__ = "role_to_permissions"

    role_name = Column(String(AuthDbConstants.ROLE_NAME_SIZE), primary_key=True)
    description = Column(Text, nullable=True)
    packed_permissions = Column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"RoleToPermissions(role_name={self.role_name!r})"


class Tenant(Base):
    __tablename__ = "tenants"

    tenant_id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_full_name = Column(String(AuthDbConstants.TENANT_NAME_SIZE), unique=True, nullable=False)
    parent_data_key = Column(String(AuthDbConstants.TENANT_DATA_KEY_SIZE), nullable=True)
    parent_tenant_id = Column(
        Integer, ForeignKey("tenants.tenant_id", ondelete="SET NULL"), nullable=True
    )

    parent = relationship("Tenant", remote_side=[tenant_id])

    @hybrid_property
    def data_key(self) -> str:
        """Parent's data key extended by this tenant's id, e.g. ``"1.4."``."""
        return f"{self.parent_data_key or ''}{self.tenant_id}."

    @data_key.inplace.expression
    @classmethod
    def _data_key_expression(cls):
        return func.coalesce(cls.parent_data_key, "") + cast(cls.tenant_id, String) + "."

    def __repr__(self) -> str:
        return f"Tenant(tenant_id={self.tenant_id!r}, tenant_full_name={self.tenant_full_name!r})"


class AuthUser(Base):
    """A user known to the authorization store.

    The setters are idempotent: assigning the current value is a no-op, so
    the session only sees real changes.
    """

    __tablename__ = "auth_users"

    user_id = Column(String(AuthDbConstants.USER_ID_SIZE), primary_key=True)
    email = Column(String(AuthDbConstants.EMAIL_SIZE), unique=True, nullable=False)
    user_name = Column(String(AuthDbConstants.USER_NAME_SIZE), nullable=True)
    tenant_id = Column(
        Integer, ForeignKey("tenants.tenant_id", ondelete="SET NULL"), nullable=True
    )

    roles = relationship(
        "RoleToPermissions",
        secondary=user_to_roles,
        order_by="RoleToPermissions.role_name",
    )
    tenant = relationship("Tenant")

    def __init__(
        self,
        user_id: str,
        email: str,
        user_name: str | None = None,
        roles: Iterable[RoleToPermissions] = (),
        tenant: Tenant | None = None,
    ) -> None:
        super().__init__(user_id=user_id, email=email, user_name=user_name)
        self.roles = list(roles)
        self.tenant = tenant

    @property
    def display_name(self) -> str:
        return self.user_name or self.email

    @property
    def role_names(self) -> list[str]:
        return [role.role_name for role in self.roles]

    def change_user_name(self, user_name: str | None) -> None:
        if user_name != self.user_name:
            self.user_name = user_name

    def change_email(self, email: str) -> None:
        if email != self.email:
            self.email = email

    def update_user_tenant(self, tenant: Tenant | None) -> None:
        new_tenant_id = tenant.tenant_id if tenant is not None else None
        if new_tenant_id != self.tenant_id:
            self.tenant = tenant

    def add_role_to_user(self, role: RoleToPermissions) -> bool:
        """Returns False if the user already had the role."""
        if role.role_name in self.role_names:
            return False
        self.roles.append(role)
        return True

    def remove_role_from_user(self, role: RoleToPermissions) -> bool:
        """Returns False if the user didn't have the role."""
        for current in self.roles:
            if current.role_name == role.role_name:
                self.roles.remove(current)
                return True
        return False

    def replace_all_roles(self, roles: Iterable[RoleToPermissions]) -> None:
        self.roles = list(roles)

    def __repr__(self) -> str:
        return f"AuthUser(user_id={self.user_id!r}, email={self.email!r})"
