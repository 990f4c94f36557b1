"""
Translation Data Models
=======================
Core data structures for one translation job.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Tuple


@dataclass(frozen=True)
class Chunk:
    """Ordered slice of source text submitted as one provider request."""
    index: int
    text: str

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass
class ChunkResult:
    """Outcome of translating a single chunk."""
    index: int
    text: str
    success: bool
    attempts: int = 0
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return not self.success


@dataclass(frozen=True)
class TermHint:
    """Terminology pair handed to the provider prompt."""
    term: str
    translation: str
    definition: str = ""


@dataclass(frozen=True)
class MemoryExemplar:
    """Translation-memory pair handed to the provider prompt."""
    source: str
    target: str
    context: str = ""


@dataclass(frozen=True)
class TranslationContext:
    """Read-only lookups for one job; built once, never mutated."""
    terminology: Tuple[TermHint, ...] = ()
    memory: Tuple[MemoryExemplar, ...] = ()
    linguistic_rules: Optional[str] = None
    punctuation_rules: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.terminology or self.memory
                    or self.linguistic_rules or self.punctuation_rules)


@dataclass
class TranslationJobResult:
    """Result of a whole translation job."""
    source_text: str
    translated_text: str
    source_lang: str
    target_lang: str
    chunk_results: List[ChunkResult] = field(default_factory=list)
    memory_saved: bool = False
    terms_learned: int = 0

    @property
    def failed_chunks(self) -> List[int]:
        return [r.index for r in self.chunk_results if r.failed]

    @property
    def success(self) -> bool:
        return not self.failed_chunks

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'translated_text': self.translated_text,
            'source_lang': self.source_lang,
            'target_lang': self.target_lang,
            'total_chunks': len(self.chunk_results),
            'failed_chunks': self.failed_chunks,
            'attempts': [r.attempts for r in self.chunk_results],
            'memory_saved': self.memory_saved,
            'terms_learned': self.terms_learned,
            'success': self.success,
        }
