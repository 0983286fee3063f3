"""Application configuration using pydantic-settings.

Execution engine credentials live here and never leave the server.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Value shipped in the sample .env; treated the same as "no secret set"
PLACEHOLDER_API_SECRET = "change-me-to-a-random-secret"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=3069, description="API server port")
    api_secret: str = Field(
        default="", description="Shared secret clients send as x-api-key (empty = disabled)"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # Execution Engine
    # ======================
    dry_run: bool = Field(
        default=True, description="Use the simulated execution engine (no real transactions)"
    )
    engine_api_url: str = Field(
        default="https://universal-api.particle.network",
        description="Execution engine gateway URL",
    )
    engine_project_id: str = Field(default="", description="Engine project ID")
    engine_client_key: str = Field(default="", description="Engine project client key")
    engine_app_id: str = Field(default="", description="Engine application UUID")
    engine_timeout_seconds: float = Field(
        default=30.0, description="Timeout for a single engine request"
    )

    # ======================
    # Pending Transactions
    # ======================
    pending_tx_ttl_seconds: float = Field(
        default=300.0, description="How long an unsigned transaction waits for a signature"
    )
    pending_tx_sweep_interval_seconds: float = Field(
        default=30.0, description="Interval of the background expiry sweep"
    )

    # ======================
    # Trading Defaults
    # ======================
    default_slippage_bps: int = Field(
        default=100, description="Default slippage tolerance in basis points (1%)"
    )
    universal_gas: bool = Field(
        default=True, description="Pay gas from primary assets instead of native tokens"
    )
    explorer_base_url: str = Field(
        default="https://universalx.app/activity/details?id=",
        description="Prefix for transaction explorer links",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def auth_enabled(self) -> bool:
        """Check if clients must present the API secret."""
        return bool(self.api_secret) and self.api_secret != PLACEHOLDER_API_SECRET

    @property
    def has_engine_credentials(self) -> bool:
        """Check if all engine project credentials are configured."""
        return bool(self.engine_project_id and self.engine_client_key and self.engine_app_id)

    def explorer_url(self, transaction_id: str) -> str:
        """Build the explorer link for a submitted transaction."""
        return f"{self.explorer_base_url}{transaction_id}"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "dry_run": self.dry_run,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "api_secret": "***" if self.auth_enabled else "(disabled)",
            "engine": {
                "url": self.engine_api_url,
                "project_id": self.engine_project_id or "(not set)",
                "client_key": "***" if self.engine_client_key else "(not set)",
                "app_id": "***" if self.engine_app_id else "(not set)",
                "timeout_seconds": self.engine_timeout_seconds,
            },
            "pending_transactions": {
                "ttl_seconds": self.pending_tx_ttl_seconds,
                "sweep_interval_seconds": self.pending_tx_sweep_interval_seconds,
            },
            "trading": {
                "default_slippage_bps": self.default_slippage_bps,
                "universal_gas": self.universal_gas,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
