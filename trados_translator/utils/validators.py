"""
Validation Utilities
====================
Functions for validating input data.
"""
from typing import Tuple, Optional, Iterable
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename
from trados_translator.config import config, SUPPORTED_LANGUAGES


def validate_file(
    file: FileStorage,
    allowed_extensions: Iterable[str] = None
) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Validate an uploaded file.

    Args:
        file: The uploaded file
        allowed_extensions: Extensions to accept (document types by default)

    Returns:
        Tuple of (is_valid, error_message, secure_filename)
    """
    if not file or not file.filename:
        return False, "No file provided", None

    filename = secure_filename(file.filename)
    if not filename:
        return False, "Invalid filename", None

    allowed_extensions = tuple(allowed_extensions or config.file.allowed_extensions)
    if not filename.lower().endswith(allowed_extensions):
        return False, f"Invalid file type. Allowed: {', '.join(allowed_extensions)}", None

    file.seek(0, 2)  # Seek to end
    file_size = file.tell()
    file.seek(0)

    max_size = config.file.max_file_size_bytes
    if file_size > max_size:
        max_mb = max_size // (1024 * 1024)
        return False, f"File too large. Maximum size: {max_mb}MB", None

    return True, None, filename


def validate_language(lang_code: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a language code.

    Args:
        lang_code: The language code to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not lang_code:
        return False, "Language code is required"

    if lang_code not in SUPPORTED_LANGUAGES:
        supported = ', '.join(SUPPORTED_LANGUAGES.keys())
        return False, f"Unsupported language: {lang_code}. Supported: {supported}"

    return True, None
