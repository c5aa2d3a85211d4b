"""
Configuration Management for PocketLedger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
User display preferences (currency symbol, month start day, ...) are NOT
configuration: they live in storage as `AppSettings` and are edited by the
user. This module only covers how the engine itself is wired.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Blob store configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="POCKETLEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    backend: str = Field(
        default="json",
        pattern="^(json|memory)$",
        description="Storage backend: one JSON file per collection, or in-memory"
    )
    data_dir: Path = Field(
        default=Path(".pocketledger"),
        description="Directory holding the JSON collection files"
    )
    key_prefix: str = Field(
        default="pl_",
        description="Prefix applied to every collection key"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed write is attempted before giving up"
    )
    
    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Allow ~ in the configured path."""
        return v.expanduser()


class LedgerSettings(BaseSettings):
    """
    Ledger engine settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="POCKETLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Recurrence
    recurrence_max_instances: int = Field(
        default=365,
        ge=1,
        description="Maximum instances generated per recurring template on one boot"
    )
    
    # Demo data
    seed_on_empty: bool = Field(
        default=True,
        description="Populate demo data when no transactions are stored"
    )
    seed_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency code used by generated demo data"
    )
    seed_currency_symbol: str = Field(
        default="$",
        description="Currency symbol forced into user preferences on reset"
    )
    
    # Validation
    validate_transactions: bool = Field(
        default=True,
        description="Reject transactions that reference unknown accounts"
    )
    
    # Assistant query guardrails
    search_result_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum transactions returned by a search"
    )
    breakdown_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum rows returned by category/merchant breakdowns"
    )
    
    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False renders for the console)"
    )


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}, plus a
    `<name>_error` entry for each section that failed.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)
    
    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)
    
    return results
