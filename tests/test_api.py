"""
Integration Tests for API Endpoints
"""
import io
import json
import re
from unittest.mock import patch

import pytest

from trados_translator.api.middleware import reset_middleware
from trados_translator.config import config
from trados_translator.database.repositories import FormattingRuleRepository
from trados_translator.errors import ProviderError
from trados_translator.services.gemini_client import GeminiClient

TMX = """<?xml version="1.0" encoding="UTF-8"?>
<tmx version="1.4"><header srclang="en"/><body>
<tu><tuv xml:lang="en"><seg>court</seg></tuv><tuv xml:lang="mk"><seg>суд</seg></tuv></tu>
<tu><tuv xml:lang="en"><seg>directive</seg></tuv><tuv xml:lang="mk"><seg>директива</seg></tuv></tu>
</body></tmx>
""".encode('utf-8')

SCENARIO = "Title\nSubtitle\n(1) First point.\n(2) Second point."

_TEXT_BLOCK = re.compile(r'<TEXT>\n(.*)\n</TEXT>', re.DOTALL)


def echo_upper(prompt):
    return _TEXT_BLOCK.search(prompt).group(1).upper()


def upload(content: bytes, filename: str):
    return {'file': (io.BytesIO(content), filename)}


@pytest.fixture
def gemini_key(monkeypatch):
    monkeypatch.setattr(config.gemini, 'api_key', 'test-gemini-key')


@pytest.fixture
def no_retry_delay(monkeypatch):
    monkeypatch.setattr(config.translation, 'retry_delay', 0)
    monkeypatch.setattr(config.translation, 'rate_limit_delay', 0)


class TestHealthEndpoints:

    def test_index(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert response.get_json()['health'] == '/api/health'

    def test_health_check(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['database'] == 'connected'
        assert 'version' in data

    def test_languages(self, client):
        data = client.get('/api/languages').get_json()
        assert data['languages']['mk'] == 'Macedonian'

    def test_language_check(self, client):
        assert client.get('/api/languages?code=hr').get_json()['supported'] is True
        assert client.get('/api/languages?code=xx').get_json()['supported'] is False

    def test_unknown_route(self, client):
        response = client.get('/api/nope')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Resource not found'


class TestTranslateEndpoint:

    def test_translate(self, client, gemini_key):
        with patch.object(GeminiClient, 'generate', side_effect=echo_upper):
            response = client.post('/api/translate', json={
                'text': 'First paragraph.\n\nSecond paragraph.',
                'source_lang': 'en',
                'target_lang': 'mk'
            })
        assert response.status_code == 200
        data = response.get_json()
        assert data['translated_text'] == 'FIRST PARAGRAPH.\n\nSECOND PARAGRAPH.'
        assert data['success'] is True
        assert data['failed_chunks'] == []
        assert data['memory_saved'] is True

        memory = client.get('/api/memory').get_json()['entries']
        assert len(memory) == 1

    def test_translate_uses_stored_key(self, client, monkeypatch):
        monkeypatch.setattr(config.gemini, 'api_key', '')
        client.put('/api/settings', json={'gemini_api_key': 'stored-key'})
        with patch.object(GeminiClient, 'generate', side_effect=echo_upper):
            response = client.post('/api/translate', json={
                'text': 'Hello.', 'source_lang': 'en', 'target_lang': 'mk'
            })
        assert response.status_code == 200

    def test_missing_key(self, client, monkeypatch):
        monkeypatch.setattr(config.gemini, 'api_key', '')
        response = client.post('/api/translate', json={
            'text': 'Hello.', 'source_lang': 'en', 'target_lang': 'mk'
        })
        assert response.status_code == 400
        assert 'API key' in response.get_json()['error']

    def test_missing_text(self, client, gemini_key):
        response = client.post('/api/translate', json={'source_lang': 'en', 'target_lang': 'mk'})
        assert response.status_code == 400

    def test_unsupported_language(self, client, gemini_key):
        response = client.post('/api/translate', json={
            'text': 'Hello.', 'source_lang': 'en', 'target_lang': 'xx'
        })
        assert response.status_code == 400
        assert 'Unsupported target language' in response.get_json()['error']

    def test_failed_chunk_reported(self, client, gemini_key, no_retry_delay):
        with patch.object(GeminiClient, 'generate', side_effect=ProviderError(500, 'boom')):
            response = client.post('/api/translate', json={
                'text': 'Hello there.', 'source_lang': 'en', 'target_lang': 'mk'
            })
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is False
        assert data['failed_chunks'] == [0]
        assert data['translated_text'].startswith('[ERROR in chunk 1]')
        assert data['memory_saved'] is False


class TestExtractTextEndpoint:

    def test_txt_upload(self, client):
        response = client.post('/api/extract-text', data=upload('Здраво'.encode('utf-8'), 'doc.txt'),
                               content_type='multipart/form-data')
        assert response.status_code == 200
        assert response.get_json()['text'] == 'Здраво'

    def test_invalid_type(self, client):
        response = client.post('/api/extract-text', data=upload(b'x', 'doc.exe'),
                               content_type='multipart/form-data')
        assert response.status_code == 400

    def test_no_file(self, client):
        response = client.post('/api/extract-text', data={}, content_type='multipart/form-data')
        assert response.status_code == 400


class TestDocumentEndpoints:

    def test_classify(self, client):
        response = client.post('/api/classify', json={'text': SCENARIO})
        assert response.status_code == 200
        lines = response.get_json()['lines']
        assert [l['role'] for l in lines] == [
            'document-title', 'document-subtitle', 'preamble-point', 'preamble-point'
        ]
        assert lines[2]['text'] == '(1)\tFirst point.'
        assert lines[2]['marker'] == '(1)'

    def test_classify_title_lines(self, client):
        lines = client.post('/api/classify', json={'text': SCENARIO, 'title_lines': 0}).get_json()['lines']
        assert lines[0]['role'] == 'body'

    def test_classify_invalid_title_lines(self, client):
        response = client.post('/api/classify', json={'text': SCENARIO, 'title_lines': 3})
        assert response.status_code == 400

    def test_classify_requires_text(self, client):
        assert client.post('/api/classify', json={}).status_code == 400

    def test_export_html(self, client):
        response = client.post('/api/export/html', json={'text': SCENARIO, 'target_lang': 'mk'})
        assert response.status_code == 200
        assert response.mimetype == 'text/html'
        assert '<p class="preamble-point">(1)\tFirst point.</p>' in response.get_data(as_text=True)

    def test_export_docx(self, client):
        response = client.post('/api/export/docx', json={'text': SCENARIO, 'target_lang': 'mk'})
        assert response.status_code == 200
        assert response.data[:2] == b'PK'
        assert 'translation_mk.docx' in response.headers['Content-Disposition']

    def test_export_with_rule_id(self, client, db):
        rule = FormattingRuleRepository(db).create('Wide', {'paragraph': {'indentLeft': 2}})
        response = client.post('/api/export/html', json={
            'text': SCENARIO, 'target_lang': 'en', 'rule_id': rule['id']
        })
        assert 'margin-left: 2.0cm;' in response.get_data(as_text=True)

    def test_export_unknown_rule(self, client):
        response = client.post('/api/export/html', json={'text': SCENARIO, 'rule_id': 999})
        assert response.status_code == 404

    def test_non_numeric_rule_id(self, client):
        response = client.post('/api/export/html', json={'text': SCENARIO, 'rule_id': 'abc'})
        assert response.status_code == 400
        assert 'rule_id must be an integer' in response.get_json()['error']

    def test_non_numeric_title_lines(self, client):
        response = client.post('/api/classify', json={'text': SCENARIO, 'title_lines': 'two'})
        assert response.status_code == 400
        assert 'title_lines must be an integer' in response.get_json()['error']

    def test_numeric_strings_accepted(self, client):
        response = client.post('/api/classify', json={'text': SCENARIO, 'title_lines': '0'})
        assert response.status_code == 200
        assert response.get_json()['lines'][0]['role'] == 'body'


class TestMemoryEndpoints:

    def test_crud(self, client):
        response = client.post('/api/memory', json={
            'source_text': 'Hello', 'target_text': 'Здраво', 'source_lang': 'en', 'target_lang': 'mk'
        })
        assert response.status_code == 201
        entry_id = response.get_json()['id']

        response = client.put(f'/api/memory/{entry_id}', json={'target_text': 'Поздрав'})
        assert response.get_json()['target_text'] == 'Поздрав'

        assert client.delete(f'/api/memory/{entry_id}').status_code == 200
        assert client.delete(f'/api/memory/{entry_id}').status_code == 404

    def test_missing_fields(self, client):
        response = client.post('/api/memory', json={'source_text': 'Hello'})
        assert response.status_code == 400
        assert 'target_text' in response.get_json()['error']

    def test_search(self, client):
        for source, target in (('court', 'суд'), ('directive', 'директива')):
            client.post('/api/memory', json={
                'source_text': source, 'target_text': target, 'source_lang': 'en', 'target_lang': 'mk'
            })
        entries = client.get('/api/memory?search=cour').get_json()['entries']
        assert [e['source_text'] for e in entries] == ['court']

    def test_import_tmx(self, client):
        response = client.post('/api/memory/import-tmx', data=upload(TMX, 'memory.tmx'),
                               content_type='multipart/form-data')
        assert response.status_code == 200
        assert response.get_json()['imported'] == 2

    def test_import_malformed_tmx(self, client):
        response = client.post('/api/memory/import-tmx', data=upload(b'<tmx><body>', 'memory.tmx'),
                               content_type='multipart/form-data')
        assert response.status_code == 422
        assert 'TMX' in response.get_json()['error']


class TestTerminologyEndpoints:

    def test_add_and_duplicate(self, client):
        term = {'term': 'court', 'translation': 'суд', 'source_lang': 'en', 'target_lang': 'mk'}
        response = client.post('/api/terminology', json=term)
        assert response.status_code == 201
        assert response.get_json()['term'] == 'court'
        assert client.post('/api/terminology', json=term).status_code == 409

    def test_update_and_delete(self, client):
        term = {'term': 'court', 'translation': 'суд', 'source_lang': 'en', 'target_lang': 'mk'}
        term_id = client.post('/api/terminology', json=term).get_json()['id']
        response = client.put(f'/api/terminology/{term_id}', json={'definition': 'judicial body'})
        assert response.get_json()['definition'] == 'judicial body'
        assert client.delete(f'/api/terminology/{term_id}').status_code == 200
        assert client.put(f'/api/terminology/{term_id}', json={'definition': 'x'}).status_code == 404

    def test_import_tmx_skips_existing(self, client):
        first = client.post('/api/terminology/import-tmx', data=upload(TMX, 'glossary.tmx'),
                            content_type='multipart/form-data').get_json()
        assert first['imported'] == 2
        second = client.post('/api/terminology/import-tmx', data=upload(TMX, 'glossary.tmx'),
                             content_type='multipart/form-data').get_json()
        assert second['imported'] == 0
        assert second['skipped'] == 2

    def test_search_and_export(self, client):
        client.post('/api/terminology/import-tmx', data=upload(TMX, 'glossary.tmx'),
                    content_type='multipart/form-data')
        entries = client.get('/api/terminology?search=dir').get_json()['entries']
        assert [e['term'] for e in entries] == ['directive']

        response = client.get('/api/terminology/export')
        assert response.mimetype == 'text/csv'
        text = response.get_data(as_text=True)
        assert text.splitlines()[0] == 'term,translation,source_lang,target_lang,category,definition,created_at'
        assert 'court,суд,en,mk,TMX Import' in text


class TestRulesEndpoints:

    def test_create_and_get(self, client):
        response = client.post('/api/rules', json={
            'name': 'Custom', 'rules_json': {'fonts': {'main': {'size': 11}}}
        })
        assert response.status_code == 201
        rule = response.get_json()
        assert rule['version'] == 1
        assert client.get(f"/api/rules/{rule['id']}").get_json()['name'] == 'Custom'

    def test_invalid_rules(self, client):
        response = client.post('/api/rules', json={
            'name': 'Broken', 'rules_json': {'margins': {'top': 'wide'}}
        })
        assert response.status_code == 422

    def test_missing_name(self, client):
        assert client.post('/api/rules', json={'rules_json': {}}).status_code == 400

    def test_update_bumps_version(self, client):
        rule_id = client.post('/api/rules', json={'name': 'Custom'}).get_json()['id']
        response = client.put(f'/api/rules/{rule_id}', json={'description': 'changed'})
        assert response.get_json()['version'] == 2

    def test_set_default(self, client):
        first = client.post('/api/rules', json={'name': 'First', 'is_default': True}).get_json()
        second = client.post('/api/rules', json={'name': 'Second'}).get_json()
        assert first['is_default'] is True

        response = client.post(f"/api/rules/{second['id']}/default")
        assert response.get_json()['is_default'] is True
        rules = client.get('/api/rules').get_json()['rules']
        assert [r['id'] for r in rules if r['is_default']] == [second['id']]

        assert client.post('/api/rules/999/default').status_code == 404

    def test_export_and_import_file(self, client):
        rule_id = client.post('/api/rules', json={
            'name': 'Portable', 'rules_json': {'paragraph': {'indentLeft': 1.5}}
        }).get_json()['id']
        exported = client.get(f'/api/rules/{rule_id}/export')
        assert exported.status_code == 200
        assert 'Portable.json' in exported.headers['Content-Disposition']

        response = client.post('/api/rules', data=upload(exported.data, 'Portable.json'),
                               content_type='multipart/form-data')
        assert response.status_code == 201
        imported = response.get_json()
        assert imported['name'] == 'Portable'
        assert imported['rules_json'] == {'paragraph': {'indentLeft': 1.5}}

    def test_import_invalid_file(self, client):
        response = client.post('/api/rules', data=upload(b'not json', 'rules.json'),
                               content_type='multipart/form-data')
        assert response.status_code == 422

    def test_delete(self, client):
        rule_id = client.post('/api/rules', json={'name': 'Temp'}).get_json()['id']
        assert client.delete(f'/api/rules/{rule_id}').status_code == 200
        assert client.get(f'/api/rules/{rule_id}').status_code == 404


class TestSettingsEndpoints:

    def test_api_key_is_masked(self, client, monkeypatch):
        monkeypatch.setattr(config.gemini, 'api_key', '')
        assert client.get('/api/settings').get_json()['has_api_key'] is False

        response = client.put('/api/settings', json={
            'gemini_api_key': 'secret', 'linguistic_rules': 'Formal register'
        })
        data = response.get_json()
        assert data['has_api_key'] is True
        assert data['linguistic_rules'] == 'Formal register'
        assert 'secret' not in json.dumps(data)

    def test_unknown_setting(self, client):
        assert client.put('/api/settings', json={'theme': 'dark'}).status_code == 400


class TestMiddleware:

    def test_api_key_required(self, client, monkeypatch):
        monkeypatch.setattr(config.security, 'api_key', 'server-secret')
        reset_middleware()
        body = {'source_text': 'a', 'target_text': 'b', 'source_lang': 'en', 'target_lang': 'mk'}

        assert client.post('/api/memory', json=body).status_code == 401
        assert client.post('/api/memory', json=body, headers={'X-API-Key': 'wrong'}).status_code == 403
        response = client.post('/api/memory', json=body, headers={'X-API-Key': 'server-secret'})
        assert response.status_code == 201

    def test_rate_limit(self, client, monkeypatch):
        monkeypatch.setattr(config.security, 'rate_limit_per_minute', 2)
        reset_middleware()

        first = client.post('/api/translate', json={})
        assert first.headers['X-RateLimit-Limit'] == '2'
        assert client.post('/api/translate', json={}).status_code == 400
        response = client.post('/api/translate', json={})
        assert response.status_code == 429
        assert response.get_json()['error'] == 'Rate limit exceeded'


class TestLogsEndpoints:

    def test_get_and_clear(self, client):
        assert 'logs' in client.get('/logs').get_json()
        assert client.post('/logs/clear').status_code == 200

    def test_channel_filter(self, client):
        client.post('/logs/clear')
        client.post('/api/classify', json={'text': "Title\nSubtitle\n(1) Point."})
        events = client.get('/logs?channel=render').get_json()['logs']
        assert events
        assert all(e['channel'] == 'render' for e in events)

    def test_unknown_channel(self, client):
        response = client.get('/logs?channel=metrics')
        assert response.status_code == 400
        assert 'dispatch' in response.get_json()['channels']
