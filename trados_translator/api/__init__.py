"""
API Module
==========
Flask API routes and blueprints.
"""
from trados_translator.api.routes import (
    create_translation_blueprint,
    create_document_blueprint,
    create_memory_blueprint,
    create_terminology_blueprint,
    create_rules_blueprint,
    create_settings_blueprint,
    create_logs_blueprint
)

__all__ = [
    'create_translation_blueprint',
    'create_document_blueprint',
    'create_memory_blueprint',
    'create_terminology_blueprint',
    'create_rules_blueprint',
    'create_settings_blueprint',
    'create_logs_blueprint'
]
