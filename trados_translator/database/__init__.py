"""
Database Module
===============
Database connection and repository implementations.
"""
from trados_translator.database.connection import Database, get_database, set_database, reset_database
from trados_translator.database.repositories import (
    BaseRepository,
    MemoryRepository,
    TerminologyRepository,
    FormattingRuleRepository,
    SettingsRepository
)

__all__ = [
    'Database',
    'get_database',
    'set_database',
    'reset_database',
    'BaseRepository',
    'MemoryRepository',
    'TerminologyRepository',
    'FormattingRuleRepository',
    'SettingsRepository'
]
