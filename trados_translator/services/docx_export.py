"""
DOCX Export
===========
Renders classified lines as a Word document with TRADOS page setup,
paragraph indents and marker/tab/body runs.
"""
import io
from typing import List

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt

from trados_translator.models.document import ClassifiedLine
from trados_translator.models.formatting import FormattingRuleSet, FontSpec
from trados_translator.services.layout import ParagraphGeometry, TableData, layout_blocks
from trados_translator.utils.logging import debug_print

A4_WIDTH_CM = 21.0
A4_HEIGHT_CM = 29.7
TABLE_FONT_SIZE = 10
TABLE_HEADER_FILL = "E6E6E6"

ALIGNMENT_MAP = {
    'left': WD_ALIGN_PARAGRAPH.LEFT,
    'right': WD_ALIGN_PARAGRAPH.RIGHT,
    'center': WD_ALIGN_PARAGRAPH.CENTER,
    'justify': WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def _set_font(target, font_name: str) -> None:
    """Set a font on a run or style, including the East Asian/complex slots."""
    target.font.name = font_name
    rpr = target.element.get_or_add_rPr()
    rfonts = rpr.get_or_add_rFonts()
    for slot in ('w:ascii', 'w:hAnsi', 'w:eastAsia', 'w:cs'):
        rfonts.set(qn(slot), font_name)


def _setup_page(document, rules: FormattingRuleSet) -> None:
    margins = rules.margins
    section = document.sections[0]
    if margins.orientation.lower() == 'landscape':
        section.orientation = WD_ORIENT.LANDSCAPE
        section.page_width, section.page_height = Cm(A4_HEIGHT_CM), Cm(A4_WIDTH_CM)
    else:
        section.orientation = WD_ORIENT.PORTRAIT
        section.page_width, section.page_height = Cm(A4_WIDTH_CM), Cm(A4_HEIGHT_CM)
    section.top_margin = Cm(margins.top)
    section.bottom_margin = Cm(margins.bottom)
    section.left_margin = Cm(margins.left)
    section.right_margin = Cm(margins.right)
    section.gutter = Cm(margins.gutter)


def _setup_styles(document, rules: FormattingRuleSet) -> None:
    para = rules.paragraph
    normal = document.styles['Normal']
    _set_font(normal, rules.main_font.name)
    normal.font.size = Pt(rules.main_font.size)
    normal.paragraph_format.space_before = Pt(para.spacing_before)
    normal.paragraph_format.space_after = Pt(para.spacing_after)
    normal.paragraph_format.line_spacing = para.line_height

    footnote = _get_or_add_style(document, 'Footnote')
    footnote.base_style = normal
    _set_font(footnote, rules.footnote_font.name)
    footnote.font.size = Pt(rules.footnote_font.size)


def _get_or_add_style(document, name: str):
    try:
        return document.styles[name]
    except KeyError:
        return document.styles.add_style(name, WD_STYLE_TYPE.PARAGRAPH)


def _add_run(paragraph, text: str, font: FontSpec, geometry: ParagraphGeometry):
    run = paragraph.add_run(text)
    _set_font(run, font.name)
    run.font.size = Pt(geometry.font_size or font.size)
    if geometry.bold:
        run.bold = True
    return run


def _add_paragraph(document, line: ClassifiedLine, geometry: ParagraphGeometry,
                   rules: FormattingRuleSet, page_break: bool):
    paragraph = document.add_paragraph()
    fmt = paragraph.paragraph_format
    fmt.alignment = ALIGNMENT_MAP.get(geometry.alignment, WD_ALIGN_PARAGRAPH.JUSTIFY)
    fmt.left_indent = Cm(geometry.left_indent)
    fmt.first_line_indent = Cm(geometry.first_line_indent)
    fmt.right_indent = Cm(rules.paragraph.indent_right)
    fmt.space_before = Pt(rules.paragraph.spacing_before if geometry.space_before is None else geometry.space_before)
    fmt.space_after = Pt(rules.paragraph.spacing_after if geometry.space_after is None else geometry.space_after)
    fmt.line_spacing = rules.paragraph.line_height
    if page_break:
        fmt.page_break_before = True

    if line.marker:
        # Marker and body stay in separate runs; the separator (tab) opens the body run
        _add_run(paragraph, line.marker, rules.main_font, geometry)
        rest = line.text[len(line.marker):]
        if rest:
            _add_run(paragraph, rest, rules.main_font, geometry)
    else:
        _add_run(paragraph, line.text, rules.main_font, geometry)
    return paragraph


def _shade_cell(cell, fill: str) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    shading = OxmlElement('w:shd')
    shading.set(qn('w:val'), 'clear')
    shading.set(qn('w:color'), 'auto')
    shading.set(qn('w:fill'), fill)
    tc_pr.append(shading)


def _write_cell(cell, text: str, font: FontSpec, bold: bool = False) -> None:
    paragraph = cell.paragraphs[0]
    paragraph.paragraph_format.first_line_indent = Cm(0)
    paragraph.paragraph_format.left_indent = Cm(0)
    run = paragraph.add_run(text)
    _set_font(run, font.name)
    run.font.size = Pt(TABLE_FONT_SIZE)
    run.bold = bold


def _add_table(document, table_data: TableData, rules: FormattingRuleSet, page_break: bool):
    if page_break:
        document.add_paragraph().add_run().add_break(WD_BREAK.PAGE)

    columns = max([len(table_data.headers)] + [len(row) for row in table_data.rows]) or 1
    table = document.add_table(rows=1 + len(table_data.rows), cols=columns)
    table.style = document.styles['Table Grid']

    for i, header in enumerate(table_data.headers):
        cell = table.rows[0].cells[i]
        _write_cell(cell, header, rules.main_font, bold=True)
        _shade_cell(cell, TABLE_HEADER_FILL)

    for r, row in enumerate(table_data.rows, start=1):
        for c, value in enumerate(row):
            _write_cell(table.rows[r].cells[c], value, rules.main_font)
    return table


def render_docx(lines: List[ClassifiedLine], rules: FormattingRuleSet = None):
    """
    Render classified lines to a ``docx.Document``.

    Indents use the same geometry as the HTML export, in absolute units.
    """
    rules = rules or FormattingRuleSet()
    document = Document()
    _setup_page(document, rules)
    _setup_styles(document, rules)

    for block in layout_blocks(lines, rules):
        if block['table'] is not None:
            _add_table(document, block['table'], rules, block['page_break'])
        else:
            _add_paragraph(document, block['line'], block['geometry'], rules, block['page_break'])

    debug_print(f"DOCX rendered: {len(lines)} lines", 'render', 'DEBUG')
    return document


def render_docx_bytes(lines: List[ClassifiedLine], rules: FormattingRuleSet = None) -> bytes:
    """Render and serialize to .docx bytes."""
    buffer = io.BytesIO()
    render_docx(lines, rules).save(buffer)
    return buffer.getvalue()
