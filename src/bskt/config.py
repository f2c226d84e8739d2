"""Application configuration using pydantic-settings."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Database
    # ======================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/bskt.db",
        description="Database connection URL",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=3001, description="API server port")
    valid_api_keys: str = Field(
        default="", description="Comma-separated list of accepted X-API-Key values"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # Snapshot backups
    # ======================
    backup_enabled: bool = Field(default=True, description="Write JSON snapshots on mutation")
    backup_dir: Path = Field(
        default=Path.home() / ".basket-enhanced",
        description="Directory for timestamped registry snapshots",
    )
    backup_queue_size: int = Field(
        default=100, description="Maximum snapshots waiting to be written"
    )

    # ======================
    # Proof of Reserve
    # ======================
    por_provider: str = Field(default="dryrun", description="POR oracle: dryrun or http")
    por_api_url: str = Field(default="", description="POR oracle endpoint")
    por_max_age_seconds: int = Field(
        default=3600, description="Maximum attestation age accepted by the gate"
    )
    por_request_timeout: float = Field(default=10.0, description="POR HTTP timeout")
    dry_run_reserve_balance: Decimal = Field(
        default=Decimal("1000000000"), description="Reserve reported by the dry-run oracle"
    )

    # ======================
    # Submission
    # ======================
    submission_provider: str = Field(
        default="dryrun", description="Transfer submission backend: dryrun or relayer"
    )
    submission_relayer_url: str = Field(default="", description="Relayer base URL")
    submission_api_key: Optional[str] = Field(default=None, description="Relayer API key")
    submission_timeout_seconds: float = Field(
        default=30.0, description="Per-asset submission timeout"
    )
    default_decimals: int = Field(
        default=6, ge=0, le=18, description="Decimals used when an asset declares none"
    )

    # ======================
    # Concurrency
    # ======================
    mint_lock_timeout: float = Field(
        default=30.0, description="Seconds to wait for a mint record lock"
    )

    @property
    def api_keys(self) -> list[str]:
        """Parse accepted API keys into a list."""
        if not self.valid_api_keys:
            return []
        return [key.strip() for key in self.valid_api_keys.split(",") if key.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "database_url": self._redact_url(self.database_url),
            "api_keys": f"{len(self.api_keys)} configured" if self.api_keys else "(none - open)",
            "backup": {
                "enabled": self.backup_enabled,
                "dir": str(self.backup_dir),
            },
            "por": {
                "provider": self.por_provider,
                "url": self.por_api_url or "(not set)",
                "max_age_seconds": self.por_max_age_seconds,
            },
            "submission": {
                "provider": self.submission_provider,
                "relayer": self.submission_relayer_url or "(not set)",
                "api_key": "***" if self.submission_api_key else "(not set)",
                "timeout_seconds": self.submission_timeout_seconds,
                "default_decimals": self.default_decimals,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact sensitive parts of database URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
