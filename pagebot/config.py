"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagebot.utils.platform import get_config_dir


class MessengerConfig(BaseModel):
    """Graph API credentials and Messenger page behaviour."""
    api_version: str = "v2.11"
    access_token: str = ""
    graph_url: str = "https://graph.facebook.com"
    get_started_payload: str = "GET_STARTED"
    timeout: float = 10.0

    @property
    def messages_url(self) -> str:
        return f"{self.graph_url.rstrip('/')}/{self.api_version}/me/messages"

    def profile_url(self, user_id: str) -> str:
        return f"{self.graph_url.rstrip('/')}/{self.api_version}/{user_id}"


class TelegramConfig(BaseModel):
    bot_name: str = "PageBot"
    command_marker: str = "/"


class WebhooksConfig(BaseModel):
    bind: str = "0.0.0.0"
    port: int = 8080
    messenger_path: str = "/messenger"
    telegram_path: str = "/telegram"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAGEBOT_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    messenger: MessengerConfig = Field(default_factory=MessengerConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    webhooks: WebhooksConfig = Field(default_factory=WebhooksConfig)
    log_level: str = "INFO"
    log_json: bool = False


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config."""
    yaml_data: dict[str, Any] = {}

    if config_path is None:
        config_path = os.environ.get("PAGEBOT_CONFIG")
    if config_path is None:
        default = get_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    # Env vars win over YAML: init kwargs would otherwise take precedence
    env_data = Settings().model_dump(exclude_unset=True)
    return Settings(**_deep_merge(yaml_data, env_data))
