"""
HTML Export
===========
Renders classified lines as a self-contained, print-ready HTML document
that word processors open with the page setup intact.
"""
from typing import List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from trados_translator.config.constants import ROLE_CSS_CLASSES
from trados_translator.models.document import ClassifiedLine
from trados_translator.models.formatting import FormattingRuleSet
from trados_translator.services.layout import layout_blocks, paragraph_geometry
from trados_translator.utils.logging import debug_print

TEMPLATE_NAME = 'trados_document.html'

_environment: Optional[Environment] = None


def get_template_environment() -> Environment:
    """Get or create the Jinja2 environment for document templates."""
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=PackageLoader('trados_translator', 'templates'),
            autoescape=select_autoescape(['html'])
        )
    return _environment


def render_html(
    lines: List[ClassifiedLine],
    rules: FormattingRuleSet = None,
    title: str = "TRADOS Legal Document"
) -> str:
    """
    Render classified lines to HTML.

    Every role gets its own CSS class; roles without one use ``normal``.
    """
    rules = rules or FormattingRuleSet()
    para = rules.paragraph

    class_styles = [
        (css_class, paragraph_geometry(role, rules))
        for role, css_class in ROLE_CSS_CLASSES.items()
    ]

    template = get_template_environment().get_template(TEMPLATE_NAME)
    html = template.render(
        title=title,
        margins=rules.margins,
        font=rules.main_font,
        footnote_font=rules.footnote_font,
        line_height=para.line_height,
        align=para.text_align,
        spacing_before=para.spacing_before,
        spacing_after=para.spacing_after,
        class_styles=class_styles,
        blocks=layout_blocks(lines, rules)
    )

    debug_print(f"HTML rendered: {len(lines)} lines, {len(html)} chars", 'render', 'DEBUG')
    return html
