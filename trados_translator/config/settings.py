"""
Centralized Configuration for TRADOS Translator
================================================
All configuration values in one place, configurable via environment variables.
"""
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    elif val in ("false", "0", "no", "off"):
        return False
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer from environment variable."""
    try:
        return int(os.environ.get(key, default))
    except (ValueError, TypeError):
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.environ.get(key, default))
    except (ValueError, TypeError):
        return default


def get_app_dir() -> str:
    """Get the writable application directory."""
    if 'TRADOS_APP_DIR' in os.environ:
        return os.environ['TRADOS_APP_DIR']
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@dataclass
class ServerConfig:
    """Flask server configuration."""
    host: str = field(default_factory=lambda: os.environ.get("TRADOS_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _get_int_env("TRADOS_PORT", 5002))
    debug: bool = field(default_factory=lambda: _get_bool_env("TRADOS_DEBUG", False))
    secret_key: str = field(default_factory=lambda: os.environ.get("SECRET_KEY", "dev-key-change-in-production"))

    # CORS settings
    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:5002",
        "http://127.0.0.1:5002"
    ])


@dataclass
class GeminiConfig:
    """Gemini API configuration."""
    api_key: str = field(default_factory=lambda: os.environ.get("GEMINI_API_KEY", ""))
    base_url: str = field(default_factory=lambda: os.environ.get(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    ))
    model: str = field(default_factory=lambda: os.environ.get("GEMINI_MODEL", "gemini-2.5-flash"))

    # Timeouts
    connect_timeout: int = field(default_factory=lambda: _get_int_env("GEMINI_CONNECT_TIMEOUT", 30))
    read_timeout: int = field(default_factory=lambda: _get_int_env("GEMINI_READ_TIMEOUT", 300))

    # Generation parameters
    temperature: float = field(default_factory=lambda: _get_float_env("GEMINI_TEMPERATURE", 0.1))
    max_output_tokens: int = field(default_factory=lambda: _get_int_env("GEMINI_MAX_OUTPUT_TOKENS", 8192))

    def generate_url(self, model: str = None) -> str:
        return f"{self.base_url}/models/{model or self.model}:generateContent"


@dataclass
class TranslationConfig:
    """Translation processing configuration."""
    # Chunk settings
    chunk_char_limit: int = field(default_factory=lambda: _get_int_env("CHUNK_CHAR_LIMIT", 4800))

    # Dispatch settings
    max_concurrency: int = field(default_factory=lambda: _get_int_env("MAX_CONCURRENCY", 3))
    max_attempts: int = field(default_factory=lambda: _get_int_env("MAX_ATTEMPTS", 3))
    retry_delay: float = field(default_factory=lambda: _get_float_env("RETRY_DELAY", 2.0))
    rate_limit_delay: float = field(default_factory=lambda: _get_float_env("RATE_LIMIT_DELAY", 5.0))

    # Context settings
    memory_exemplar_limit: int = field(default_factory=lambda: _get_int_env("MEMORY_EXEMPLAR_LIMIT", 10))
    auto_learn_terms: bool = field(default_factory=lambda: _get_bool_env("AUTO_LEARN_TERMS", True))


@dataclass
class RenderingConfig:
    """Document rendering configuration."""
    # Target language that gets the built-in rule override merged on top
    default_locale: str = field(default_factory=lambda: os.environ.get("DEFAULT_LOCALE", "mk"))
    title_lines: int = field(default_factory=lambda: _get_int_env("TITLE_LINES", 2))


@dataclass
class FileConfig:
    """File handling configuration."""
    max_file_size_mb: int = field(default_factory=lambda: _get_int_env("MAX_FILE_SIZE_MB", 10))
    allowed_extensions: Tuple[str, ...] = field(default_factory=lambda: (".txt", ".docx", ".pdf"))

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@dataclass
class LoggingConfig:
    """Logging configuration."""
    verbose_debug: bool = field(default_factory=lambda: _get_bool_env("VERBOSE_DEBUG", False))
    log_buffer_size: int = field(default_factory=lambda: _get_int_env("LOG_BUFFER_SIZE", 500))
    log_file_max_bytes: int = field(default_factory=lambda: _get_int_env("LOG_FILE_MAX_BYTES", 10 * 1024 * 1024))
    log_file_backup_count: int = field(default_factory=lambda: _get_int_env("LOG_FILE_BACKUP_COUNT", 5))


@dataclass
class SecurityConfig:
    """Security configuration."""
    api_key: str = field(default_factory=lambda: os.environ.get("API_KEY", ""))
    rate_limit_per_minute: int = field(default_factory=lambda: _get_int_env("RATE_LIMIT_PER_MINUTE", 60))
    db_timeout: int = field(default_factory=lambda: _get_int_env("DB_TIMEOUT", 30))


@dataclass
class PathConfig:
    """Path configuration."""
    app_dir: str = field(default_factory=get_app_dir)

    @property
    def export_folder(self) -> Path:
        return Path(self.app_dir) / 'exports'

    @property
    def log_folder(self) -> Path:
        return Path(self.app_dir) / 'logs'

    @property
    def db_path(self) -> str:
        return os.environ.get('TRADOS_DB_PATH', os.path.join(self.app_dir, 'trados.db'))


@dataclass
class Config:
    """Main application configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    translation: TranslationConfig = field(default_factory=TranslationConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    file: FileConfig = field(default_factory=FileConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    paths: PathConfig = field(default_factory=PathConfig)

    def __post_init__(self):
        """Create necessary directories after initialization."""
        self._create_directories()
        self._validate()

    def _create_directories(self):
        """Create necessary directories."""
        for folder in [self.paths.export_folder, self.paths.log_folder]:
            os.makedirs(folder, exist_ok=True)

    def _validate(self):
        """Validate configuration values."""
        if self.translation.chunk_char_limit < 100:
            raise ValueError("chunk_char_limit must be at least 100")
        if self.translation.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.translation.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.file.max_file_size_mb < 1:
            raise ValueError("max_file_size_mb must be at least 1")


# Global configuration instance
config = Config()
