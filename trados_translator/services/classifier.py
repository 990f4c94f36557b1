"""
Structural Classifier
=====================
Tags each line of a translated legal act with its structural role.

Body lines are matched against an ordered rule table; the first matching
rule wins. New marker conventions are added as new table rows.
"""
import re
from typing import List, NamedTuple, Optional, Pattern

from trados_translator.config import config
from trados_translator.config.constants import LineRole
from trados_translator.models.document import ClassifiedLine
from trados_translator.models.formatting import FormattingRuleSet, CleaningRules
from trados_translator.utils.logging import debug_print

SOFT_HYPHEN = '\u00ad'
MANUAL_LINE_BREAKS = re.compile('[\u000b\u2028]')
MULTIPLE_SPACES = re.compile(r' {2,}')
WHITESPACE_RUN = re.compile(r'[ \t]+')


class ClassificationRule(NamedTuple):
    role: LineRole
    pattern: Pattern
    has_marker: bool


# Evaluated top to bottom; markers are the full match of the pattern
RULES = (
    ClassificationRule(LineRole.NUMBERED_POINT, re.compile(r'^\d+\.'), True),
    ClassificationRule(LineRole.PREAMBLE_POINT, re.compile(r'^\(\d+\)'), True),
    ClassificationRule(LineRole.LETTERED_POINT, re.compile(r'^\([^\W\d_]\)'), True),
    ClassificationRule(LineRole.BULLET_POINT, re.compile(r'^—'), True),
    ClassificationRule(LineRole.SECTION_HEADER, re.compile(r':$'), False),
    ClassificationRule(LineRole.ARTICLE_TITLE, re.compile(r'\b[^\W\d_]+\s+\d+$'), False),
)

TITLE_ROLES = (LineRole.DOCUMENT_TITLE, LineRole.DOCUMENT_SUBTITLE)


def clean_text(text: str, cleaning: Optional[CleaningRules] = None) -> str:
    """
    Apply the rule set's cleaning switches and trim.

    Applying it twice gives the same result as applying it once.
    """
    cleaning = cleaning or CleaningRules()
    if cleaning.remove_optional_hyphens:
        text = text.replace(SOFT_HYPHEN, '')
    if cleaning.replace_manual_line_breaks:
        text = MANUAL_LINE_BREAKS.sub(' ', text)
    if cleaning.remove_multiple_spaces:
        text = MULTIPLE_SPACES.sub(' ', text)
    return text.strip()


def classify_line(line: str, use_tabs: bool = True) -> ClassifiedLine:
    """Classify one cleaned body line."""
    for rule in RULES:
        match = rule.pattern.search(line)
        if not match:
            continue
        if not rule.has_marker:
            return ClassifiedLine(rule.role, line)

        marker = match.group(0)
        rest = line[len(marker):].lstrip(' \t')
        separator = '\t' if use_tabs else ' '
        text = f"{marker}{separator}{rest}" if rest else marker
        return ClassifiedLine(rule.role, text, marker)

    return ClassifiedLine(LineRole.BODY, line)


def classify(
    text: str,
    rules: Optional[FormattingRuleSet] = None,
    title_lines: Optional[int] = None
) -> List[ClassifiedLine]:
    """
    Split text into classified lines.

    Args:
        text: Translated document text
        rules: Active rule set (defaults apply when omitted)
        title_lines: How many leading lines are title/subtitle (0-2)

    Returns:
        One ClassifiedLine per non-empty input line, in order
    """
    rules = rules or FormattingRuleSet()
    if title_lines is None:
        title_lines = config.rendering.title_lines
    title_lines = max(0, min(title_lines, len(TITLE_ROLES)))

    lines = []
    for raw in text.replace('\r\n', '\n').replace('\r', '\n').split('\n'):
        line = clean_text(WHITESPACE_RUN.sub(' ', raw), rules.cleaning)
        if line:
            lines.append(line)

    classified: List[ClassifiedLine] = []
    for position, line in enumerate(lines):
        if position < title_lines:
            classified.append(ClassifiedLine(TITLE_ROLES[position], line))
        else:
            classified.append(classify_line(line, rules.tabs.use_tabs_after_manual_numbers))

    debug_print(f"{len(classified)} lines classified", 'render', 'DEBUG')
    return classified
