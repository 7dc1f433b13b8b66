"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from config/settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if "server" in data:
            server = data["server"]
            flattened["host"] = server.get("host")
            flattened["port"] = server.get("port")
        if "upstream" in data:
            upstream = data["upstream"]
            flattened["upstream_provider"] = upstream.get("provider")
            flattened["upstream_model"] = upstream.get("model")
            flattened["openai_model"] = upstream.get("openai_model")
            flattened["upstream_max_tokens"] = upstream.get("max_tokens")
            flattened["upstream_base_url"] = upstream.get("base_url")
            flattened["anthropic_version"] = upstream.get("anthropic_version")
            flattened["upstream_timeout_seconds"] = upstream.get("timeout_seconds")
        if "client" in data:
            client = data["client"]
            flattened["gateway_url"] = client.get("gateway_url")
            flattened["client_timeout_seconds"] = client.get("timeout_seconds")
            flattened["ui_locale"] = client.get("ui_locale")

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream completion service (a missing key switches the gateway to template replies)
    claude_api_key: str | None = Field(default=None, description="Anthropic API key")
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    upstream_provider: Literal["anthropic", "openai"] = Field(default="anthropic")
    upstream_model: str = Field(default="claude-3-sonnet-20240229")
    openai_model: str = Field(default="gpt-4o-mini")
    upstream_max_tokens: int = Field(default=1000)
    upstream_base_url: str = Field(default="https://api.anthropic.com")
    anthropic_version: str = Field(default="2023-06-01")
    upstream_timeout_seconds: float = Field(default=30.0)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Client
    gateway_url: str = Field(default="http://localhost:8000")
    client_timeout_seconds: float = Field(default=60.0)
    ui_locale: str = Field(default="en-US")

    @property
    def upstream_api_key(self) -> str | None:
        """Credential for the selected upstream provider."""
        if self.upstream_provider == "openai":
            return self.openai_api_key
        return self.claude_api_key

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
