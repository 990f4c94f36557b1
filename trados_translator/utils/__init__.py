"""
TRADOS Translator - Utility Functions
"""
from trados_translator.utils.logging import (
    CHANNELS,
    EventBuffer,
    get_channel,
    debug_print
)
from trados_translator.utils.text_processing import (
    CHUNK_JOINER,
    split_into_chunks,
    split_into_sentences,
    clean_translation_response,
    normalize_text
)
from trados_translator.utils.validators import (
    validate_file,
    validate_language
)

__all__ = [
    "CHANNELS",
    "EventBuffer",
    "get_channel",
    "debug_print",
    "CHUNK_JOINER",
    "split_into_chunks",
    "split_into_sentences",
    "clean_translation_response",
    "normalize_text",
    "validate_file",
    "validate_language"
]
