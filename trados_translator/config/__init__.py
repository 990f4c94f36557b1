"""
TRADOS Translator - Configuration Module
"""
from trados_translator.config.settings import Config, config
from trados_translator.config.constants import (
    SUPPORTED_LANGUAGES,
    LineRole
)

__all__ = [
    "Config",
    "config",
    "SUPPORTED_LANGUAGES",
    "LineRole"
]
