"""Test configuration module."""

from modelgate.config import AppConfig


class TestAppConfig:
    """Test application configuration."""

    def test_should_load_default_values(self):
        """Test default configuration."""
        config = AppConfig(_env_file=None)
        assert config.app_name == "ModelGate"
        assert config.default_provider == "groq"
        assert config.api_port == 8000
        assert config.cache_max_entries == 1000

    def test_should_parse_allowed_origins(self):
        """Test allowed origins parsing."""
        config = AppConfig(
            allowed_origins="http://localhost:3000, http://localhost:8000"
        )
        origins = config.allowed_origins_list
        assert len(origins) == 2
        assert "http://localhost:8000" in origins

    def test_should_only_list_configured_api_keys(self):
        """Test API keys exclude blank entries."""
        config = AppConfig(groq_api_key="g-key", openai_api_key="")
        keys = config.api_keys()
        assert keys["groq"] == "g-key"
        assert "openai" not in keys

    def test_should_read_environment(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("DEFAULT_PROVIDER", "openai")
        monkeypatch.setenv("CACHE_DEFAULT_TTL_MS", "1000")
        config = AppConfig()
        assert config.default_provider == "openai"
        assert config.cache_default_ttl_ms == 1000

    def test_should_identify_development_environment(self):
        """Test environment detection."""
        config = AppConfig(app_env="development")
        assert config.is_development is True
        assert config.is_production is False

    def test_should_identify_production_environment(self):
        """Test production detection."""
        config = AppConfig(app_env="production")
        assert config.is_production is True
