"""
Request/Response Schemas
========================
Validation schemas for API requests and responses.
"""
from dataclasses import dataclass
from typing import Optional, List

from trados_translator.config.constants import SUPPORTED_LANGUAGES


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _optional_int(value):
    """Coerce a JSON value to int; non-numeric values are returned unchanged for validate()."""
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


@dataclass
class TranslateRequest:
    """Request schema for the translation endpoint."""
    text: str
    source_language: str
    target_language: str
    api_key: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict) -> 'TranslateRequest':
        return cls(
            text=data.get('text') or '',
            source_language=data.get('source_lang') or '',
            target_language=data.get('target_lang') or '',
            api_key=data.get('api_key') or None,
        )

    def validate(self) -> List[str]:
        """Validate the request and return list of errors."""
        errors = []
        if not self.text.strip():
            errors.append("text is required")
        if self.source_language not in SUPPORTED_LANGUAGES:
            errors.append(f"Unsupported source language: {self.source_language}")
        if self.target_language not in SUPPORTED_LANGUAGES:
            errors.append(f"Unsupported target language: {self.target_language}")
        return errors


@dataclass
class RenderRequest:
    """Request schema for classify/export endpoints."""
    text: str
    target_language: str = ""
    rule_id: Optional[int] = None
    title_lines: Optional[int] = None

    @classmethod
    def from_json(cls, data: dict) -> 'RenderRequest':
        return cls(
            text=data.get('text') or '',
            target_language=data.get('target_lang') or '',
            rule_id=_optional_int(data.get('rule_id')),
            title_lines=_optional_int(data.get('title_lines')),
        )

    def validate(self) -> List[str]:
        errors = []
        if not self.text.strip():
            errors.append("text is required")
        if self.rule_id is not None and not _is_int(self.rule_id):
            errors.append("rule_id must be an integer")
        if self.title_lines is not None:
            if not _is_int(self.title_lines):
                errors.append("title_lines must be an integer")
            elif not 0 <= self.title_lines <= 2:
                errors.append("title_lines must be 0, 1 or 2")
        return errors
