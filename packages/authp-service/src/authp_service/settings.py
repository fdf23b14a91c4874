"""Service configuration via environment variables."""

from pydantic_settings import BaseSettings

from authp.config import AuthPermissionsOptions, TenantType


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./authp.db"
    create_schema: bool = True

    # Service ports
    rest_port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Authorization
    authp_tenant_type: TenantType = TenantType.NOT_USING_TENANTS

    # Authentication provider: JSON list of {"user_id", "email", "user_name"}
    authp_identity_source_path: str | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def auth_options(self) -> AuthPermissionsOptions:
        return AuthPermissionsOptions(tenant_type=self.authp_tenant_type)


settings = Settings()
