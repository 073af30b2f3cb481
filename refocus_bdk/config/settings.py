"""Root settings model for the bot development kit."""

from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from refocus_bdk.config.models.cache import CacheConfig, DisabledCacheConfig
from refocus_bdk.config.models.http import HTTPConfig
from refocus_bdk.config.models.install import InstallConfig
from refocus_bdk.config.models.observability import LoggingConfig
from refocus_bdk.config.models.realtime import RealtimeConfig

# Module-level variable to store TOML config for settings source
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that reads from TOML configuration."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        """Get field value from TOML config."""
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        """Return the TOML config values."""
        return _toml_config.copy()


class Settings(BaseSettings):
    """Immutable configuration handed to the requester, cache and installer.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{BDK_ENV}.toml (environment overrides)
    4. BDK_* environment variables (runtime overrides)
    5. Constructor arguments
    """

    model_config = SettingsConfigDict(
        env_prefix="BDK_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    refocus_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the Refocus server",
    )
    token: SecretStr | None = Field(
        default=None,
        description="API token sent in the Authorization header",
    )
    http_proxy: str | None = Field(
        default=None,
        description="Forward proxy for every REST call",
    )
    bot_name: str | None = Field(
        default=None,
        description="Name of the bot; also the consumer identity for dedup keys",
    )

    http: HTTPConfig = Field(default_factory=HTTPConfig, description="Request settings")
    cache: CacheConfig = Field(
        default_factory=DisabledCacheConfig,
        description="Event dedup cache backend",
    )
    realtime: RealtimeConfig = Field(
        default_factory=RealtimeConfig,
        description="Realtime and polling settings",
    )
    install: InstallConfig = Field(
        default_factory=InstallConfig,
        description="Bot install/update settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )

    @property
    def api_url(self) -> str:
        """Versioned API root, e.g. ``https://refocus.example.com/v1``."""
        return f"{self.refocus_url.rstrip('/')}/v1"

    def token_value(self) -> str | None:
        """Return the raw token, or None when not configured."""
        return self.token.get_secret_value() if self.token else None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include TOML config.

        Priority order (highest to lowest):
        1. init_settings (constructor arguments)
        2. env_settings (BDK_* environment variables)
        3. toml_settings (config/*.toml files)
        4. (defaults from model)
        """
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
