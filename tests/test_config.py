"""
Unit Tests for Configuration System
"""
import pytest

from trados_translator.config.settings import (
    Config, ServerConfig, GeminiConfig, TranslationConfig, RenderingConfig,
    FileConfig, PathConfig, _get_bool_env, _get_int_env, _get_float_env
)


class TestEnvHelpers:
    """Test environment variable helper functions."""

    def test_get_bool_env_true_values(self, monkeypatch):
        for val in ["true", "1", "yes", "on", "TRUE", "True"]:
            monkeypatch.setenv("TEST_BOOL", val)
            assert _get_bool_env("TEST_BOOL", False) is True

    def test_get_bool_env_false_values(self, monkeypatch):
        for val in ["false", "0", "no", "off", "FALSE", "False"]:
            monkeypatch.setenv("TEST_BOOL", val)
            assert _get_bool_env("TEST_BOOL", True) is False

    def test_get_bool_env_default(self, monkeypatch):
        monkeypatch.delenv("TEST_BOOL", raising=False)
        assert _get_bool_env("TEST_BOOL", True) is True
        assert _get_bool_env("TEST_BOOL", False) is False

    def test_get_int_env(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "42")
        assert _get_int_env("TEST_INT", 0) == 42

    def test_get_int_env_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "not_a_number")
        assert _get_int_env("TEST_INT", 99) == 99

    def test_get_float_env(self, monkeypatch):
        monkeypatch.setenv("TEST_FLOAT", "3.14")
        assert _get_float_env("TEST_FLOAT", 0.0) == pytest.approx(3.14)

    def test_get_float_env_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_FLOAT", "not_a_float")
        assert _get_float_env("TEST_FLOAT", 2.5) == 2.5


class TestServerConfig:

    def test_default_values(self, monkeypatch):
        monkeypatch.delenv("TRADOS_HOST", raising=False)
        monkeypatch.delenv("TRADOS_PORT", raising=False)
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 5002
        assert len(config.cors_origins) > 0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TRADOS_HOST", "0.0.0.0")
        monkeypatch.setenv("TRADOS_PORT", "8080")
        config = ServerConfig()
        assert config.host == "0.0.0.0"
        assert config.port == 8080


class TestGeminiConfig:

    def test_default_values(self, monkeypatch):
        monkeypatch.delenv("GEMINI_MODEL", raising=False)
        monkeypatch.delenv("GEMINI_TEMPERATURE", raising=False)
        config = GeminiConfig()
        assert config.model == "gemini-2.5-flash"
        assert config.temperature == pytest.approx(0.1)
        assert config.max_output_tokens == 8192

    def test_generate_url(self):
        config = GeminiConfig(base_url="https://example.test/v1beta", model="m1")
        assert config.generate_url() == "https://example.test/v1beta/models/m1:generateContent"
        assert config.generate_url("m2").endswith("/models/m2:generateContent")


class TestTranslationConfig:

    def test_default_values(self, monkeypatch):
        for key in ("CHUNK_CHAR_LIMIT", "MAX_CONCURRENCY", "MAX_ATTEMPTS",
                    "RETRY_DELAY", "RATE_LIMIT_DELAY", "MEMORY_EXEMPLAR_LIMIT"):
            monkeypatch.delenv(key, raising=False)
        config = TranslationConfig()
        assert config.chunk_char_limit == 4800
        assert config.max_concurrency == 3
        assert config.max_attempts == 3
        assert config.retry_delay == pytest.approx(2.0)
        assert config.rate_limit_delay == pytest.approx(5.0)
        assert config.memory_exemplar_limit == 10


class TestRenderingConfig:

    def test_default_locale(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_LOCALE", raising=False)
        assert RenderingConfig().default_locale == "mk"


class TestFileConfig:

    def test_max_file_size_bytes(self):
        config = FileConfig()
        assert config.max_file_size_bytes == config.max_file_size_mb * 1024 * 1024

    def test_allowed_extensions(self):
        config = FileConfig()
        assert ".txt" in config.allowed_extensions
        assert ".docx" in config.allowed_extensions
        assert ".pdf" in config.allowed_extensions


class TestPathConfig:

    def test_db_path_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TRADOS_DB_PATH", str(tmp_path / "custom.db"))
        assert PathConfig(app_dir=str(tmp_path)).db_path == str(tmp_path / "custom.db")

    def test_db_path_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("TRADOS_DB_PATH", raising=False)
        assert PathConfig(app_dir=str(tmp_path)).db_path.endswith("trados.db")


class TestConfig:

    def test_all_sections_present(self):
        config = Config()
        for section in ('server', 'gemini', 'translation', 'rendering', 'file', 'logging', 'security', 'paths'):
            assert hasattr(config, section)

    def test_validation_chunk_limit(self):
        config = Config()
        config.translation.chunk_char_limit = 50
        with pytest.raises(ValueError, match="chunk_char_limit"):
            config._validate()

    def test_validation_concurrency(self):
        config = Config()
        config.translation.max_concurrency = 0
        with pytest.raises(ValueError, match="max_concurrency"):
            config._validate()

    def test_validation_attempts(self):
        config = Config()
        config.translation.max_attempts = 0
        with pytest.raises(ValueError, match="max_attempts"):
            config._validate()
