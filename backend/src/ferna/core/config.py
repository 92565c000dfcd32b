"""Centralized application settings using pydantic-settings.

All environment variable reads are consolidated here. Call `get_settings()`
from this module rather than reading os.environ directly.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from ferna.core.auth.credentials import Argon2Parameters


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All env vars are prefixed with FERNA_ (case-insensitive).
    """

    model_config = SettingsConfigDict(
        env_prefix="FERNA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_version: str = "0.1.0"

    # Database
    database_url: str = "sqlite+aiosqlite:///./ferna.db"

    # Logging
    log_format: str = "console"
    log_level: str = "INFO"

    # Password hashing (only affects newly encoded credentials)
    argon2_memory_cost: int = 65536
    argon2_time_cost: int = 1
    argon2_parallelism: int = 4
    argon2_salt_len: int = 16
    argon2_hash_len: int = 32

    # Login / signup
    login_lookup_timeout: float = 5.0
    min_password_length: int = 6

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def argon2_parameters(self) -> Argon2Parameters:
        """Build the cost parameters handed to the credential hasher."""
        return Argon2Parameters(
            memory_cost=self.argon2_memory_cost,
            time_cost=self.argon2_time_cost,
            parallelism=self.argon2_parallelism,
            salt_len=self.argon2_salt_len,
            hash_len=self.argon2_hash_len,
        )


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton."""
    return Settings()
