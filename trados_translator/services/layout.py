"""
Paragraph Layout
================
Numeric layout shared by the HTML and DOCX renderers, so both formats
indent and space every role identically.
"""
import json
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from trados_translator.config.constants import LineRole, ANNEX_PATTERN
from trados_translator.models.document import ClassifiedLine
from trados_translator.models.formatting import FormattingRuleSet

_ANNEX = re.compile(ANNEX_PATTERN, re.IGNORECASE)


@dataclass(frozen=True)
class ParagraphGeometry:
    """Indents in centimeters, spacing and font size in points."""
    left_indent: float
    first_line_indent: float
    alignment: str
    bold: bool = False
    font_size: Optional[float] = None
    space_before: Optional[float] = None
    space_after: Optional[float] = None


@dataclass(frozen=True)
class TableData:
    headers: List[str]
    rows: List[List[str]]


def paragraph_geometry(role: LineRole, rules: FormattingRuleSet) -> ParagraphGeometry:
    """Indent, alignment and emphasis for one role under ``rules``."""
    para = rules.paragraph
    indent = para.indent_left
    hanging = para.hanging_indent

    if role == LineRole.DOCUMENT_TITLE:
        return ParagraphGeometry(0, 0, 'center', bold=True, font_size=16, space_before=24, space_after=12)
    if role == LineRole.DOCUMENT_SUBTITLE:
        return ParagraphGeometry(0, 0, 'center', bold=True, space_before=0, space_after=18)
    if role == LineRole.SECTION_HEADER:
        return ParagraphGeometry(0, 0, 'left', bold=True, space_before=12, space_after=6)
    if role == LineRole.ARTICLE_TITLE:
        return ParagraphGeometry(0, 0, 'left', bold=True, font_size=14, space_before=18, space_after=6)
    if role == LineRole.LETTERED_POINT:
        return ParagraphGeometry(indent + 0.5, -hanging, para.text_align)
    if role == LineRole.BULLET_POINT:
        return ParagraphGeometry(indent + 1, -0.5, para.text_align)

    # numbered, preamble and body paragraphs share the hanging layout
    return ParagraphGeometry(indent, -hanging, para.text_align)


def parse_table(text: str) -> Optional[TableData]:
    """A line holding {"headers": [...], "rows": [[...]]} describes a table."""
    stripped = text.strip()
    if not (stripped.startswith('{') and stripped.endswith('}')):
        return None
    try:
        data = json.loads(stripped)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    headers, rows = data.get('headers'), data.get('rows')
    if not isinstance(headers, list) or not isinstance(rows, list):
        return None
    if not all(isinstance(row, list) for row in rows):
        return None
    return TableData(
        headers=[str(h) for h in headers],
        rows=[[str(cell) for cell in row] for row in rows]
    )


def is_annex(text: str) -> bool:
    return bool(_ANNEX.match(text))


def needs_page_break(line: ClassifiedLine, rules: FormattingRuleSet, is_table: bool) -> bool:
    if is_table:
        return rules.page_breaks.before_tables
    return rules.page_breaks.before_annexes and is_annex(line.text)


def layout_blocks(lines: List[ClassifiedLine], rules: FormattingRuleSet) -> List[Dict]:
    """
    Pair each line with its geometry, table data and page-break flag.

    The first block never starts a new page.
    """
    blocks = []
    for position, line in enumerate(lines):
        table = parse_table(line.text) if line.role == LineRole.BODY else None
        blocks.append({
            'line': line,
            'geometry': paragraph_geometry(line.role, rules),
            'table': table,
            'page_break': position > 0 and needs_page_break(line, rules, table is not None),
        })
    return blocks
