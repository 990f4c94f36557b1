"""
Terminology Extractor
=====================
Learns candidate term pairs from a finished translation.
"""
import re
from typing import List, Optional, Tuple

from trados_translator.config.constants import STOP_WORDS, AUTO_LEARNED_CATEGORY
from trados_translator.database.repositories import TerminologyRepository
from trados_translator.errors import AlignmentMismatch
from trados_translator.models.records import TerminologyEntry
from trados_translator.utils.logging import get_channel, debug_print

_SENTENCE_BREAK = re.compile(r'[.!?]\s+')
_LIGHT_PUNCTUATION = re.compile(r'[.,;:!?()\[\]"“”„«»]')
_MIN_SENTENCE_LENGTH = 10


def split_sentences(text: str) -> List[str]:
    """Sentences longer than ten characters, in order."""
    sentences = (s.strip() for s in _SENTENCE_BREAK.split(text))
    return [s for s in sentences if len(s) > _MIN_SENTENCE_LENGTH]


def _qualifies(token: str) -> bool:
    return (
        len(token) > 2
        and any(c.isalpha() for c in token)
        and token.lower() not in STOP_WORDS
    )


def extract_phrases(sentence: str) -> List[str]:
    """
    Candidate phrases of one sentence, in order.

    A qualifying token directly after another qualifying token is paired
    with it ("prev token"); otherwise it stands alone.
    """
    tokens = _LIGHT_PUNCTUATION.sub('', sentence).split()
    phrases: List[str] = []
    seen = set()
    previous: Optional[str] = None

    for token in tokens:
        if not _qualifies(token):
            previous = None
            continue
        phrase = f"{previous} {token}" if previous else token
        if phrase not in seen:
            seen.add(phrase)
            phrases.append(phrase)
        previous = token

    return phrases


def _is_noise(phrase: str) -> bool:
    stripped = phrase.replace(' ', '')
    return len(phrase) <= 2 or stripped.isdigit()


def align_sentences(source_text: str, translated_text: str) -> List[Tuple[str, str]]:
    """
    Pair source and translated sentences by position.

    Raises:
        AlignmentMismatch: the sentence counts differ
    """
    source = split_sentences(source_text)
    target = split_sentences(translated_text)
    if len(source) != len(target):
        raise AlignmentMismatch(len(source), len(target))
    return list(zip(source, target))


def extract_terms(
    source_text: str,
    translated_text: str,
    source_lang: str,
    target_lang: str
) -> List[TerminologyEntry]:
    """
    Heuristic term candidates from an aligned (source, translation) pair.

    Returns an empty list when the sentence structure cannot be aligned.
    """
    logger = get_channel('translation')
    try:
        pairs = align_sentences(source_text, translated_text)
    except AlignmentMismatch as e:
        logger.info(f"Skipping term extraction: {e}")
        return []

    entries: List[TerminologyEntry] = []
    seen = set()
    for source_sentence, target_sentence in pairs:
        for term, translation in zip(extract_phrases(source_sentence), extract_phrases(target_sentence)):
            if _is_noise(term) or _is_noise(translation):
                continue
            entry = TerminologyEntry(
                term=term,
                translation=translation,
                source_lang=source_lang,
                target_lang=target_lang,
                category=AUTO_LEARNED_CATEGORY,
            )
            if entry.key in seen:
                continue
            seen.add(entry.key)
            entries.append(entry)

    debug_print(f"{len(entries)} candidates from {len(pairs)} sentence pairs", 'translation', 'DEBUG')
    return entries


class TerminologyLearner:
    """Extracts candidates and stores the ones not yet known."""

    def __init__(self, repository: TerminologyRepository = None):
        self.repository = repository or TerminologyRepository()
        self.logger = get_channel('translation')

    def learn(self, source_text: str, translated_text: str, source_lang: str, target_lang: str) -> int:
        """Returns the number of new terminology rows."""
        candidates = extract_terms(source_text, translated_text, source_lang, target_lang)
        if not candidates:
            return 0
        learned = self.repository.upsert_entries(candidates)
        self.logger.info(f"Auto-learned {learned} new terms ({len(candidates)} candidates)")
        return learned
