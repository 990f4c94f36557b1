"""
TRADOS Translator - Data Models
"""
from trados_translator.models.translation import (
    Chunk,
    ChunkResult,
    TermHint,
    MemoryExemplar,
    TranslationContext,
    TranslationJobResult
)
from trados_translator.models.document import ClassifiedLine
from trados_translator.models.formatting import FormattingRuleSet, resolve_rules
from trados_translator.models.records import TerminologyEntry, MemoryEntry, TmxEntry
from trados_translator.models.schemas import TranslateRequest, RenderRequest

__all__ = [
    "Chunk",
    "ChunkResult",
    "TermHint",
    "MemoryExemplar",
    "TranslationContext",
    "TranslationJobResult",
    "ClassifiedLine",
    "FormattingRuleSet",
    "resolve_rules",
    "TerminologyEntry",
    "MemoryEntry",
    "TmxEntry",
    "TranslateRequest",
    "RenderRequest"
]
