import pytest

from flowgraph.compiler.errors import ConfigurationError
from flowgraph.config import Settings, load_settings


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.strategy == "compiler"
        assert settings.openai_api_key is None
        assert settings.model == "gpt-4.1-mini"
        assert settings.timeout == 60.0
        assert settings.max_retries == 2
        assert settings.log_level == "INFO"
        assert settings.cors_origins == ["*"]

    def test_from_env(self):
        settings = Settings.from_env({
            "FLOWGRAPH_STRATEGY": " LLM ",
            "OPENAI_API_KEY": "sk-test",
            "FLOWGRAPH_MODEL": "gpt-4o-mini",
            "FLOWGRAPH_TIMEOUT": "12.5",
            "FLOWGRAPH_MAX_RETRIES": "0",
            "FLOWGRAPH_LOG_LEVEL": "debug",
            "FLOWGRAPH_CORS_ORIGINS": "http://localhost:3000, https://example.com",
        })
        assert settings.strategy == "llm"
        assert settings.openai_api_key == "sk-test"
        assert settings.model == "gpt-4o-mini"
        assert settings.timeout == 12.5
        assert settings.max_retries == 0
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ["http://localhost:3000", "https://example.com"]

    def test_empty_key_is_missing(self):
        assert Settings.from_env({"OPENAI_API_KEY": ""}).openai_api_key is None

    @pytest.mark.parametrize("env", [
        {"FLOWGRAPH_STRATEGY": "magic"},
        {"FLOWGRAPH_TIMEOUT": "soon"},
        {"FLOWGRAPH_TIMEOUT": "0"},
        {"FLOWGRAPH_MAX_RETRIES": "-1"},
        {"FLOWGRAPH_MAX_RETRIES": "two"},
    ])
    def test_invalid_values(self, env):
        with pytest.raises(ConfigurationError):
            Settings.from_env(env)

    def test_load_settings_reads_dotenv(self, tmp_path, monkeypatch):
        monkeypatch.delenv("FLOWGRAPH_MODEL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("FLOWGRAPH_MODEL=from-dotenv\n", encoding="utf-8")
        settings = load_settings(str(env_file))
        assert settings.model == "from-dotenv"
        monkeypatch.delenv("FLOWGRAPH_MODEL", raising=False)
