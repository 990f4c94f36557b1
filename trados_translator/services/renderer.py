"""
Document Renderer
=================
Text in, finished document out: resolve rules, classify, render.
"""
from typing import Any, Dict, Optional, Union

from trados_translator.models.formatting import resolve_rules
from trados_translator.services.classifier import classify
from trados_translator.services.docx_export import render_docx_bytes
from trados_translator.services.html_export import render_html

RENDERERS = {
    'html': render_html,
    'docx': render_docx_bytes,
}


def render_document(
    text: str,
    rules_json: Optional[Dict[str, Any]] = None,
    target_lang: Optional[str] = None,
    fmt: str = 'html',
    title_lines: Optional[int] = None
) -> Union[str, bytes]:
    """
    Render translated text in the requested format.

    Returns:
        HTML as ``str`` or DOCX as ``bytes``
    """
    renderer = RENDERERS.get(fmt)
    if renderer is None:
        raise ValueError(f"Unsupported export format: {fmt}")

    rules = resolve_rules(rules_json, target_lang)
    lines = classify(text, rules, title_lines)
    return renderer(lines, rules)
