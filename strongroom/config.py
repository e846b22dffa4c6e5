"""
Strongroom configuration management.

Loads configuration from environment variables or .env file.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StrongroomConfig(BaseSettings):
    """
    Strongroom configuration settings.

    Can be loaded from:
    1. Environment variables (STRONGROOM_SUPABASE_URL, STRONGROOM_JWT_SECRET, etc.)
    2. .env file in project root
    3. Direct instantiation with kwargs

    Example:
        ```python
        # From environment
        config = StrongroomConfig()

        # Direct instantiation
        config = StrongroomConfig(
            supabase_url="https://xxx.supabase.co",
            supabase_key="your-key",
            jwt_secret="signing-secret",
        )
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="STRONGROOM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase connection
    supabase_url: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)",
    )

    supabase_key: str = Field(
        ...,
        description="Supabase service role key",
    )

    # Database schema
    db_schema: str = Field(
        default="public",
        description="PostgreSQL schema where strongroom tables live",
    )

    # JWT settings (verification only, tokens are issued elsewhere)
    jwt_secret: Optional[str] = Field(
        default=None,
        description="Shared secret used to verify access token signatures",
    )

    jwt_algorithm: str = Field(
        default="HS256",
        description="Signature algorithm expected on access tokens",
    )

    # Role catalog
    roles_file: Optional[Path] = Field(
        default=None,
        description="JSON file mapping role names to permission lists (built-in table if unset)",
    )

    # Limits
    max_per_page: int = Field(
        default=50,
        ge=1,
        le=100,
        description="Upper bound for per_page on entry searches",
    )

    max_vaults_per_tenant: int = Field(default=10, ge=1)

    max_entries_per_vault: int = Field(default=10000, ge=1)

    max_users_per_tenant: int = Field(default=50, ge=1)

    # Debug
    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Ensure Supabase URL is valid."""
        if not v.startswith("https://"):
            raise ValueError("supabase_url must start with https://")
        return v.rstrip("/")

    @field_validator("supabase_key")
    @classmethod
    def validate_supabase_key(cls, v: str) -> str:
        """Ensure Supabase key is not empty."""
        if not v or len(v) < 10:
            raise ValueError("supabase_key appears invalid (too short)")
        return v

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if v.lower() == "none":
            raise ValueError("jwt_algorithm must name a signing algorithm")
        return v


def load_config(**kwargs) -> StrongroomConfig:
    """
    Load Strongroom configuration.

    Priority order:
    1. Keyword arguments
    2. Environment variables (STRONGROOM_*)
    3. .env file

    Args:
        **kwargs: Override configuration values

    Returns:
        StrongroomConfig instance

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    return StrongroomConfig(**kwargs)
