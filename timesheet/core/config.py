"""Application configuration."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Timesheet Backend"
    app_env: str = "development"
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # google_sheets | memory
    row_store_backend: str = "google_sheets"
    sheet_id: str = ""
    google_project_id: str = ""
    google_private_key: str = ""
    google_client_email: str = ""
    # Timezone used for the entry "Timestamp" column.
    entry_timezone: str = "Asia/Tokyo"
    # Keep .env support for comma-separated values (non-JSON).
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("google_private_key", mode="before")
    @classmethod
    def restore_key_newlines(cls, value: str | None) -> str:
        # Hosting dashboards store the PEM block with escaped newlines.
        return (value or "").replace("\\n", "\n")

    def missing_sheet_settings(self) -> list[str]:
        """Names of environment values required by the Google Sheets backend that are unset."""

        required = {
            "SHEET_ID": self.sheet_id,
            "GOOGLE_PROJECT_ID": self.google_project_id,
            "GOOGLE_PRIVATE_KEY": self.google_private_key,
            "GOOGLE_CLIENT_EMAIL": self.google_client_email,
        }
        return [name for name, value in required.items() if not value.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""

    return Settings()
