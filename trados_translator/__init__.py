"""
TRADOS Translator - EU legal act translation and TRADOS-style formatting
========================================================================
This package provides a Flask-based service that:
1. Translates long legal texts through Gemini with bounded concurrency
2. Classifies the translated lines by structural role
3. Exports TRADOS-formatted HTML and DOCX documents

Version: 1.0.0
"""

__version__ = "1.0.0"

from trados_translator.app import create_app, run_server

__all__ = ["create_app", "run_server", "__version__"]
