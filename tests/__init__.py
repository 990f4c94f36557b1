"""
TRADOS Translator - Test Suite
==============================
Unit and integration tests for the TRADOS Translator application.
Run with: pytest tests/ -v
"""
