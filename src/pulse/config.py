"""Configuration system using pydantic-settings with environment variable loading."""

from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from pulse.exceptions import ConfigurationError


class StorageSettings(BaseSettings):
    """Location of the per-user settings and history documents.

    The base directory is handed to SettingsStore and HistoryStore at
    construction so tests can point both at an isolated directory.
    """

    model_config = SettingsConfigDict(env_prefix="PULSE_STORAGE_")

    base_dir: Path = Path.home() / ".pulse"

    @property
    def settings_path(self) -> Path:
        return self.base_dir / "settings.json"

    @property
    def history_dir(self) -> Path:
        return self.base_dir / "history"


class HistorySettings(BaseSettings):
    """Snapshot history retention."""

    model_config = SettingsConfigDict(env_prefix="PULSE_HISTORY_")

    max_snapshots: int = 90  # sliding window, oldest evicted first


class StripeSettings(BaseSettings):
    """Stripe API access parameters (the API key itself lives on each integration)."""

    model_config = SettingsConfigDict(env_prefix="STRIPE_")

    api_base: str = "https://api.stripe.com/v1"
    page_size: int = 100  # single page per query, no further pagination
    timeout_seconds: float = 30.0
    lookback_days: int = 30
    events_limit: int = 20


class OAuthSettings(BaseSettings):
    """Google OAuth application identity for the calendar integration.

    No defaults: the identity must be supplied through the environment
    or a secret store. The OAuth flow itself lives in the desktop shell;
    the core only checks at startup that the identity is present
    (main.oauth_configured) and hands it over through require_credentials.
    """

    model_config = SettingsConfigDict(env_prefix="GOOGLE_OAUTH_")

    client_id: SecretStr | None = None
    client_secret: SecretStr | None = None

    def require_credentials(self) -> tuple[str, str]:
        """Return (client_id, client_secret) or raise ConfigurationError."""
        if self.client_id is None or not self.client_id.get_secret_value():
            raise ConfigurationError("GOOGLE_OAUTH_CLIENT_ID is not configured")
        if self.client_secret is None or not self.client_secret.get_secret_value():
            raise ConfigurationError("GOOGLE_OAUTH_CLIENT_SECRET is not configured")
        return (
            self.client_id.get_secret_value(),
            self.client_secret.get_secret_value(),
        )


class DashboardSettings(BaseSettings):
    """Dashboard API server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "127.0.0.1"
    port: int = 8080
    enabled: bool = True


class RefreshSettings(BaseSettings):
    """Background refresh loop.

    The cadence itself is the settings document's refreshInterval (minutes).
    """

    model_config = SettingsConfigDict(env_prefix="REFRESH_")

    enabled: bool = True


class PulseSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"
    storage: StorageSettings = StorageSettings()
    history: HistorySettings = HistorySettings()
    stripe: StripeSettings = StripeSettings()
    oauth: OAuthSettings = OAuthSettings()
    dashboard: DashboardSettings = DashboardSettings()
    refresh: RefreshSettings = RefreshSettings()
