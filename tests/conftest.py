"""
Shared pytest fixtures.
"""
import os
import sys
import tempfile

# Setup test environment before the package reads its configuration
os.environ.setdefault('TRADOS_APP_DIR', tempfile.mkdtemp(prefix='trados-test-'))
os.environ.setdefault('VERBOSE_DEBUG', 'false')
os.environ.setdefault('GEMINI_API_KEY', '')
os.environ.setdefault('API_KEY', '')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from trados_translator.database.connection import Database, set_database, reset_database


@pytest.fixture
def db(tmp_path):
    """Fresh sqlite database installed as the global database."""
    database = Database(tmp_path / 'test.db')
    set_database(database)
    yield database
    reset_database()


@pytest.fixture
def app(db):
    from trados_translator.app import create_app
    from trados_translator.api.middleware import reset_middleware

    reset_middleware()
    application = create_app(testing=True)
    yield application
    reset_middleware()


@pytest.fixture
def client(app):
    """Create test client for Flask app."""
    with app.test_client() as client:
        yield client
