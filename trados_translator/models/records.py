"""
Persisted Record Models
=======================
Rows of the translation-memory and terminology stores.
"""
from dataclasses import dataclass, asdict
from typing import Optional, Tuple

from trados_translator.config.constants import AUTO_LEARNED_CATEGORY


@dataclass
class TerminologyEntry:
    """A term pair; (term, translation, source_lang, target_lang) is unique."""
    term: str
    translation: str
    source_lang: str
    target_lang: str
    definition: str = ""
    category: str = AUTO_LEARNED_CATEGORY
    context: str = ""
    imported_from: Optional[str] = None
    imported_at: Optional[str] = None
    id: Optional[int] = None

    @property
    def key(self) -> Tuple[str, str, str, str]:
        return (self.term, self.translation, self.source_lang, self.target_lang)

    def to_row(self) -> dict:
        row = asdict(self)
        row.pop('id')
        return row


@dataclass
class MemoryEntry:
    """A translation-memory pair."""
    source_text: str
    target_text: str
    source_lang: str
    target_lang: str
    context: str = ""
    id: Optional[int] = None

    def to_row(self) -> dict:
        row = asdict(self)
        row.pop('id')
        return row


@dataclass
class TmxEntry:
    """One translation unit read from a TMX file."""
    source: str
    target: str
    source_lang: str
    target_lang: str
    context: Optional[str] = None
    note: Optional[str] = None
