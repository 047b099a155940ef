"""Tests for settings loading."""

from pagebot.config import MessengerConfig, Settings, WebhooksConfig, load_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.messenger.api_version == "v2.11"
        assert settings.messenger.get_started_payload == "GET_STARTED"
        assert settings.telegram.command_marker == "/"
        assert isinstance(settings.webhooks, WebhooksConfig)
        assert settings.webhooks.port == 8080

    def test_messenger_urls(self):
        cfg = MessengerConfig(api_version="v3.0", graph_url="https://graph.example.com/")
        assert cfg.messages_url == "https://graph.example.com/v3.0/me/messages"
        assert cfg.profile_url("42") == "https://graph.example.com/v3.0/42"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PAGEBOT_MESSENGER__ACCESS_TOKEN", "from-env")
        assert Settings().messenger.access_token == "from-env"


class TestLoadSettings:
    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PAGEBOT_CONFIG", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "messenger:\n  access_token: yaml-token\n  api_version: v4.0\n"
            "webhooks:\n  port: 9000\n"
        )
        settings = load_settings(path)
        assert settings.messenger.access_token == "yaml-token"
        assert settings.messenger.api_version == "v4.0"
        assert settings.webhooks.port == 9000

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PAGEBOT_MESSENGER__ACCESS_TOKEN", "from-env")
        path = tmp_path / "config.yaml"
        path.write_text("messenger:\n  access_token: yaml-token\n  api_version: v4.0\n")
        settings = load_settings(path)
        assert settings.messenger.access_token == "from-env"
        assert settings.messenger.api_version == "v4.0"

    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PAGEBOT_CONFIG_DIR", str(tmp_path))
        monkeypatch.delenv("PAGEBOT_CONFIG", raising=False)
        settings = load_settings()
        assert settings.messenger.access_token == ""
        assert settings.webhooks.messenger_path == "/messenger"
