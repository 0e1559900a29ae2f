"""
Roster configuration.

Every value comes from the environment (or a local .env file) and is
checked by pydantic when the app boots, so a typo in the timezone or a
negative week cap stops startup instead of surfacing mid-request.

With SNOWFLAKE_MOCK_MODE=true the app runs entirely in memory and none of
the Snowflake credentials are needed.
"""

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Environment-backed settings.

    Names map to upper-case environment variables (api_keys -> API_KEYS).
    List-like values are comma-separated strings.
    """

    # API
    api_title: str = "Coach Roster API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Accepted X-API-Key values, comma-separated. Two keys allow rotation."
    )

    # Snowflake
    snowflake_account: str = Field(
        default="",
        description="Account identifier, e.g. xy12345.eu-west-1"
    )
    snowflake_user: str = Field(
        default="",
        description="Service user the API connects as"
    )
    snowflake_password: str = Field(
        default="",
        description="Password for the service user, if not using a key"
    )
    snowflake_private_key_path: Optional[str] = Field(
        default=None,
        description="PEM private key on disk for key-pair auth"
    )
    snowflake_private_key_base64: Optional[str] = Field(
        default=None,
        description="Same PEM key, base64-encoded, for hosts without a writable disk"
    )
    snowflake_database: str = Field(
        default="COACHROSTER",
        description="Database holding the athletes and programs tables"
    )
    snowflake_schema: str = Field(
        default="ROSTER",
        description="Schema holding the athletes and programs tables"
    )
    snowflake_warehouse: str = Field(
        default="COMPUTE_WH",
        description="Warehouse that runs roster queries"
    )
    snowflake_role: Optional[str] = Field(
        default=None,
        description="Role to assume after connecting"
    )
    snowflake_mock_mode: bool = Field(
        default=False,
        description="Keep athletes and programs in process memory instead of Snowflake"
    )

    # Scheduling
    local_timezone: str = Field(
        default="UTC",
        description="IANA timezone that decides what 'today' is for week counting and check-in dates."
    )
    default_week_cap: int = Field(
        default=12,
        ge=1,
        description="Highest week offered at check-in for athletes without a program."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level name"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Origins allowed to call the API from a browser, comma-separated, or *"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("local_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def api_keys_list(self) -> list[str]:
        return _split_csv(self.api_keys)

    @property
    def cors_origins_list(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return _split_csv(self.cors_origins)

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.local_timezone)

    def validate_required_fields(self) -> list[str]:
        """
        Names of settings that must be set but aren't.

        Pydantic can't express this on its own: Snowflake credentials are
        only needed outside mock mode, and any one auth method will do.
        """
        missing = []

        if not self.api_keys_list:
            missing.append("API_KEYS")

        if self.snowflake_mock_mode:
            return missing

        if not self.snowflake_account:
            missing.append("SNOWFLAKE_ACCOUNT")
        if not self.snowflake_user:
            missing.append("SNOWFLAKE_USER")
        has_credential = (
            self.snowflake_password
            or self.snowflake_private_key_path
            or self.snowflake_private_key_base64
        )
        if not has_credential:
            missing.append("SNOWFLAKE_PASSWORD or SNOWFLAKE_PRIVATE_KEY_PATH/BASE64")

        return missing


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Process-wide settings, read once.

    Tests either override this dependency or call get_settings.cache_clear().
    """
    return Settings()
