"""
TRADOS Translator - Services
"""
from trados_translator.services.gemini_client import GeminiClient
from trados_translator.services.dispatcher import ChunkDispatcher, join_results
from trados_translator.services.translator import TranslationService
from trados_translator.services.classifier import classify, clean_text
from trados_translator.services.html_export import render_html
from trados_translator.services.docx_export import render_docx, render_docx_bytes
from trados_translator.services.renderer import render_document
from trados_translator.services.terminology import extract_terms, TerminologyLearner

__all__ = [
    "GeminiClient",
    "ChunkDispatcher",
    "join_results",
    "TranslationService",
    "classify",
    "clean_text",
    "render_html",
    "render_docx",
    "render_docx_bytes",
    "render_document",
    "extract_terms",
    "TerminologyLearner"
]
