"""
Text Processing Utilities
=========================
Functions for processing and manipulating text.
"""
import re
from typing import List, Tuple

from trados_translator.config import config
from trados_translator.models.translation import Chunk
from trados_translator.utils.logging import debug_print

# Joiner used both to pack paragraphs and to reassemble translated chunks
CHUNK_JOINER = "\n\n"

_PARAGRAPH_BREAK = re.compile(r'\n{2,}')
# Whitespace after terminal punctuation, or a line break; captured so it can be kept
_SENTENCE_BREAK = re.compile(r'((?<=[.?!;])\s+|[ \t]*\n\s*)')


def normalize_text(text: str) -> str:
    """
    Normalize line endings and trim the text.

    Args:
        text: Text to normalize

    Returns:
        Normalized text
    """
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    return text.strip()


def _pack(pieces: List[str], joiner: str, max_length: int) -> List[str]:
    """Greedily pack pieces into strings no longer than max_length."""
    packed = []
    current = ""
    for piece in pieces:
        if not current:
            current = piece
        elif len(current) + len(joiner) + len(piece) <= max_length:
            current = current + joiner + piece
        else:
            packed.append(current)
            current = piece
    if current:
        packed.append(current)
    return packed


def _sentence_pieces(paragraph: str) -> List[Tuple[str, str]]:
    """(separator before, sentence) pairs; the first separator is empty."""
    parts = _SENTENCE_BREAK.split(paragraph)
    pieces = []
    separator = ""
    for i, part in enumerate(parts):
        if i % 2:
            separator += part
        elif part:
            pieces.append((separator if pieces else "", part))
            separator = ""
    return pieces


def _render(pieces: List[Tuple[str, str]]) -> str:
    return "".join(sep + sentence for sep, sentence in pieces)


def _pack_sentences(paragraph: str, max_length: int) -> List[str]:
    """
    Pack the sentences of an oversized paragraph under the budget.

    Sentences keep their original separators, so line breaks inside the
    paragraph survive. A full chunk is closed at its last line break when
    it has one, carrying the rest of that line into the next chunk.
    """
    packed = []
    current: List[Tuple[str, str]] = []
    length = 0

    for separator, sentence in _sentence_pieces(paragraph):
        if not current:
            current, length = [("", sentence)], len(sentence)
            continue
        if length + len(separator) + len(sentence) <= max_length:
            current.append((separator, sentence))
            length += len(separator) + len(sentence)
            continue

        breaks = [i for i, (sep, _) in enumerate(current) if i and '\n' in sep]
        if breaks and '\n' not in separator:
            cut = breaks[-1]
            packed.append(_render(current[:cut]))
            current = [("", current[cut][1])] + current[cut + 1:]
            length = len(_render(current))
            if length + len(separator) + len(sentence) <= max_length:
                current.append((separator, sentence))
                length += len(separator) + len(sentence)
                continue

        packed.append(_render(current))
        current, length = [("", sentence)], len(sentence)

    if current:
        packed.append(_render(current))
    return packed


def split_into_sentences(paragraph: str) -> List[str]:
    """Split at the whitespace following a terminal . ? ! or ; and at line breaks."""
    return [s.strip() for s in _SENTENCE_BREAK.split(paragraph)[::2] if s.strip()]


def split_into_chunks(text: str, max_length: int = None) -> List[Chunk]:
    """
    Split text into chunks for translation.

    Paragraph boundaries are preferred; a paragraph longer than the budget is
    split at sentence boundaries. A sentence longer than the budget is kept
    whole as its own chunk.

    Args:
        text: Text to split
        max_length: Maximum chunk length (uses config if not specified)

    Returns:
        List of chunks with contiguous 0-based indices
    """
    if max_length is None:
        max_length = config.translation.chunk_char_limit

    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(normalize_text(text))]
    paragraphs = [p for p in paragraphs if p]

    texts: List[str] = []
    pending: List[str] = []

    for paragraph in paragraphs:
        if len(paragraph) <= max_length:
            pending.append(paragraph)
            continue

        # Oversized paragraph closes whatever is pending
        texts.extend(_pack(pending, CHUNK_JOINER, max_length))
        pending = []
        texts.extend(_pack_sentences(paragraph, max_length))

    texts.extend(_pack(pending, CHUNK_JOINER, max_length))

    chunks = [Chunk(index=i, text=t) for i, t in enumerate(texts)]

    debug_print(f"Split text into {len(chunks)} chunks", 'translation', 'DEBUG')
    debug_print(f"  Input: {len(text)} chars, {len(paragraphs)} paragraphs", 'translation', 'DEBUG')
    debug_print(f"  Max chunk size: {max_length} chars", 'translation', 'DEBUG')
    for chunk in chunks:
        preview = chunk.text[:60].replace('\n', ' ')
        debug_print(f"  Chunk {chunk.index + 1}: {chunk.length} chars - {preview}...", 'translation', 'DEBUG')

    return chunks


def clean_translation_response(translation: str) -> str:
    """
    Clean the model response down to the translated text.

    Removes code fences, <TEXT> wrappers, reasoning tags and a leading
    "Translation:" label. Tabs and line structure are left alone.

    Args:
        translation: Raw response text

    Returns:
        Cleaned translation
    """
    if not translation:
        return ""

    original_len = len(translation)

    translation = re.sub(r'<think>.*?</think>', '', translation, flags=re.DOTALL | re.IGNORECASE)
    translation = re.sub(r'<thinking>.*?</thinking>', '', translation, flags=re.DOTALL | re.IGNORECASE)
    translation = re.sub(r'<think>.*$', '', translation, flags=re.DOTALL | re.IGNORECASE)

    unwanted_patterns = [
        r'^\s*```[a-zA-Z]*[ \t]*\n?',
        r'\n?```\s*$',
        r'</?TEXT>',
        r'^\s*\*\*Translation:?\*\*[ \t]*\n?',
        r'^\s*Translation:[ \t]*\n?',
        r'^\s*Here is the translation:?[ \t]*\n?',
    ]
    for pattern in unwanted_patterns:
        translation = re.sub(pattern, '', translation, flags=re.IGNORECASE)

    translation = translation.strip('\n ')

    final_len = len(translation)
    if original_len != final_len:
        debug_print(f"Removed {original_len - final_len} chars ({original_len} -> {final_len})", 'translation', 'DEBUG')

    return translation