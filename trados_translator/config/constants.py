"""
Constants and Enums for TRADOS Translator
"""
from enum import Enum
from typing import Dict, Any

# Supported languages with their display names
SUPPORTED_LANGUAGES = {
    'en': 'English',
    'mk': 'Macedonian',
    'hr': 'Croatian',
    'sr': 'Serbian',
    'bs': 'Bosnian',
    'sl': 'Slovenian',
    'bg': 'Bulgarian',
    'sq': 'Albanian',
    'de': 'German',
    'fr': 'French',
    'it': 'Italian',
    'es': 'Spanish',
}


class LineRole(str, Enum):
    """Structural role of one output line."""
    DOCUMENT_TITLE = "document-title"
    DOCUMENT_SUBTITLE = "document-subtitle"
    NUMBERED_POINT = "numbered-point"
    PREAMBLE_POINT = "preamble-point"
    LETTERED_POINT = "lettered-point"
    BULLET_POINT = "bullet-point"
    SECTION_HEADER = "section-header"
    ARTICLE_TITLE = "article-title"
    BODY = "body"


# One style class per role; anything else renders as "normal"
ROLE_CSS_CLASSES: Dict[LineRole, str] = {
    LineRole.DOCUMENT_TITLE: "document-title",
    LineRole.DOCUMENT_SUBTITLE: "document-subtitle",
    LineRole.NUMBERED_POINT: "article-point",
    LineRole.PREAMBLE_POINT: "preamble-point",
    LineRole.LETTERED_POINT: "letter-point",
    LineRole.BULLET_POINT: "bullet-point",
    LineRole.SECTION_HEADER: "section-header",
    LineRole.ARTICLE_TITLE: "article-title",
    LineRole.BODY: "normal",
}
FALLBACK_CSS_CLASS = "normal"

LINE_HEIGHTS = {
    'single': 1.0,
    '1.5': 1.5,
    '1.5 lines': 1.5,
    'double': 2.0,
}

ALIGNMENTS = ('left', 'right', 'center', 'justify')

# Lines starting with one of these words open an annex
ANNEX_PATTERN = r'^(annex|annexe|anhang|прилог|анекс)\b'

# Terminology categories
AUTO_LEARNED_CATEGORY = "Auto-Learned"
TMX_IMPORT_CATEGORY = "TMX Import"

# Uniqueness key of a terminology entry
TERMINOLOGY_KEY = ('term', 'translation', 'source_lang', 'target_lang')

# Function words skipped by the term auto-extractor
STOP_WORDS = frozenset({
    # English
    'and', 'or', 'the', 'of', 'in', 'on', 'at', 'to', 'for', 'with', 'by',
    'from', 'this', 'that', 'these', 'those', 'which', 'shall', 'are', 'was',
    'were', 'been', 'has', 'have', 'had', 'its', 'their', 'not', 'any', 'all',
    'such', 'into', 'upon', 'other', 'where', 'when', 'than', 'also',
    # Macedonian
    'и', 'или', 'на', 'во', 'од', 'за', 'со', 'кој', 'која', 'кое', 'кои',
    'што', 'тоа', 'тие', 'тој', 'таа', 'овој', 'оваа', 'ова', 'овие', 'како',
    'по', 'до', 'при', 'без', 'меѓу', 'преку', 'под', 'над', 'се', 'ќе',
    # Croatian / Serbian / Bosnian
    'ili', 'na', 'za', 'od', 'koji', 'koja', 'koje', 'kao', 'što', 'ovaj',
    'ova', 'ovo', 'prema', 'nakon', 'prije', 'između', 'te', 'pri',
})

# Built-in EU legal acts rule set, camelCase JSON interchange shape
DEFAULT_RULES: Dict[str, Any] = {
    "fonts": {
        "main": {"name": "Times New Roman", "size": 12},
        "footnotes": {"name": "Times New Roman", "size": 10, "language": "en-GB"},
    },
    "margins": {
        "top": 2.54,
        "bottom": 2.54,
        "left": 3.17,
        "right": 3.17,
        "gutter": 0,
        "orientation": "portrait",
    },
    "paragraph": {
        "spacingBefore": 6,
        "spacingAfter": 6,
        "lineSpacing": "single",
        "alignment": "justify",
        "indentLeft": 1,
        "indentRight": 0,
        "hangingIndent": 1,
    },
    "cleaning": {
        "removeMultipleSpaces": True,
        "removeOptionalHyphens": True,
        "replaceManualLineBreaks": True,
    },
    "numbering": {
        "preamble": {"style": "parenthesized", "format": "(1)"},
        "mainBody": {"style": "period", "format": "1."},
        "letters": {"style": "parenthesized", "format": "(a)"},
    },
    "pageBreaks": {"beforeAnnexes": True, "beforeTables": True},
    "tabs": {"useTabsAfterManualNumbers": True},
}

DEFAULT_RULE_NAME = "EU Legal Acts - TRADOS Standard"
DEFAULT_RULE_DESCRIPTION = "Universal TRADOS formatting for all EU legal acts"

# Rule overrides merged on top of the selected rule set, per target language
LOCALE_RULE_OVERRIDES: Dict[str, Dict[str, Any]] = {
    'mk': DEFAULT_RULES,
}
