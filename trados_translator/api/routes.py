"""
API Routes
==========
Flask blueprints for all API endpoints.
"""
import io
import sqlite3
from pathlib import Path
from typing import Optional

from flask import Blueprint, request, jsonify, send_file, Response

from trados_translator import __version__
from trados_translator.config import config, SUPPORTED_LANGUAGES
from trados_translator.database.connection import get_database
from trados_translator.database.repositories import (
    MemoryRepository,
    TerminologyRepository,
    FormattingRuleRepository,
    SettingsRepository
)
from trados_translator.errors import ImportFormatError
from trados_translator.models.formatting import FormattingRuleSet, resolve_rules
from trados_translator.models.records import TerminologyEntry
from trados_translator.models.schemas import TranslateRequest, RenderRequest
from trados_translator.services.classifier import classify
from trados_translator.services.renderer import render_document
from trados_translator.services.translator import TranslationService
from trados_translator.api.middleware import rate_limit, require_api_key
from trados_translator.utils.interchange import (
    parse_tmx,
    tmx_to_memory,
    tmx_to_terminology,
    parse_rule_set_json,
    export_rule_set_json,
    export_terminology_csv,
    extract_text
)
from trados_translator.utils.logging import CHANNELS, get_channel, event_buffer
from trados_translator.utils.validators import validate_file, validate_language

DOCX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

# Keys accepted by PUT /api/settings
SETTING_KEYS = ('gemini_api_key', 'linguistic_rules', 'punctuation_rules')


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


def _int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    return request.args.get(name, default, type=int)


def _missing(data: dict, *fields) -> list:
    return [f for f in fields if not str(data.get(f) or '').strip()]


def _uploaded_file(extensions):
    """Validated upload from the ``file`` form field; returns (file, name, error)."""
    file = request.files.get('file')
    valid, error, filename = validate_file(file, extensions)
    if not valid:
        return None, None, error
    return file, filename, None


def create_translation_blueprint() -> Blueprint:
    """Create translation routes blueprint."""
    bp = Blueprint('translations', __name__, url_prefix='/api')
    logger = get_channel('api')

    @bp.route('/translate', methods=['POST'])
    @require_api_key
    @rate_limit
    def translate():
        """Translate text synchronously and return the job result."""
        payload = TranslateRequest.from_json(_json_body())
        errors = payload.validate()
        if errors:
            return jsonify({'error': '; '.join(errors)}), 400

        settings = SettingsRepository()
        body = _json_body()
        api_key = payload.api_key or settings.get('gemini_api_key') or None
        linguistic_rules = body.get('linguistic_rules') or settings.get('linguistic_rules')
        punctuation_rules = body.get('punctuation_rules') or settings.get('punctuation_rules')

        logger.info(
            f"Translation requested: {len(payload.text)} chars, "
            f"{payload.source_language} -> {payload.target_language}"
        )
        result = TranslationService().translate_sync(
            payload.text,
            payload.source_language,
            payload.target_language,
            api_key=api_key,
            linguistic_rules=linguistic_rules,
            punctuation_rules=punctuation_rules
        )
        return jsonify(result.to_dict())

    @bp.route('/extract-text', methods=['POST'])
    @require_api_key
    def extract_uploaded_text():
        """Extract plain text from an uploaded .txt/.docx/.pdf file."""
        file, filename, error = _uploaded_file(config.file.allowed_extensions)
        if error:
            return jsonify({'error': error}), 400

        text = extract_text(filename, file.read())
        return jsonify({'filename': filename, 'text': text, 'characters': len(text)})

    return bp


def _load_rules(rule_id: Optional[int]):
    """Rules JSON for an explicit rule id or the current default; None if unknown id."""
    repo = FormattingRuleRepository()
    if rule_id is not None:
        row = repo.get_by_id(rule_id)
        return (row['rules_json'] if row else None), row is not None
    default = repo.get_default()
    return (default['rules_json'] if default else None), True


def create_document_blueprint() -> Blueprint:
    """Create classification and export routes blueprint."""
    bp = Blueprint('documents', __name__, url_prefix='/api')
    logger = get_channel('api')

    def _parse_render_request():
        payload = RenderRequest.from_json(_json_body())
        errors = payload.validate()
        if errors:
            return payload, None, (jsonify({'error': '; '.join(errors)}), 400)
        rules_json, found = _load_rules(payload.rule_id)
        if not found:
            return payload, None, (jsonify({'error': 'Formatting rule not found'}), 404)
        return payload, rules_json, None

    @bp.route('/classify', methods=['POST'])
    def classify_text():
        """Return the structural role of every line."""
        payload, rules_json, error = _parse_render_request()
        if error:
            return error
        rules = resolve_rules(rules_json, payload.target_language)
        lines = classify(payload.text, rules, payload.title_lines)
        return jsonify({'lines': [line.to_dict() for line in lines]})

    @bp.route('/export/html', methods=['POST'])
    def export_html():
        payload, rules_json, error = _parse_render_request()
        if error:
            return error
        html = render_document(payload.text, rules_json, payload.target_language, 'html', payload.title_lines)
        logger.info(f"HTML export: {len(html)} chars")
        return Response(html, mimetype='text/html')

    @bp.route('/export/docx', methods=['POST'])
    def export_docx():
        payload, rules_json, error = _parse_render_request()
        if error:
            return error
        data = render_document(payload.text, rules_json, payload.target_language, 'docx', payload.title_lines)
        logger.info(f"DOCX export: {len(data)} bytes")
        return send_file(
            io.BytesIO(data),
            mimetype=DOCX_MIMETYPE,
            as_attachment=True,
            download_name=f"translation_{payload.target_language or 'document'}.docx"
        )

    return bp


def create_memory_blueprint() -> Blueprint:
    """Create translation-memory routes blueprint."""
    bp = Blueprint('memory', __name__, url_prefix='/api/memory')
    logger = get_channel('api')

    @bp.route('', methods=['GET'])
    def list_memory():
        search = request.args.get('search', '')
        equals = {k: request.args[k] for k in ('source_lang', 'target_lang') if request.args.get(k)}
        substring = {'source_text': search, 'target_text': search} if search else None
        entries = MemoryRepository().select_all(
            filter_equals=equals,
            filter_substring=substring,
            limit=_int_arg('limit'),
            offset=_int_arg('offset', 0)
        )
        return jsonify({'entries': entries})

    @bp.route('', methods=['POST'])
    @require_api_key
    def add_memory():
        data = _json_body()
        missing = _missing(data, 'source_text', 'target_text', 'source_lang', 'target_lang')
        if missing:
            return jsonify({'error': f"Missing fields: {', '.join(missing)}"}), 400
        entry = MemoryRepository().add(
            data['source_text'], data['target_text'],
            data['source_lang'], data['target_lang'],
            data.get('context') or ''
        )
        return jsonify(entry), 201

    @bp.route('/<int:entry_id>', methods=['PUT'])
    @require_api_key
    def update_memory(entry_id: int):
        data = _json_body()
        repo = MemoryRepository()
        changes = {k: v for k, v in data.items() if k in repo.fields}
        if not repo.update(entry_id, changes):
            return jsonify({'error': 'Memory entry not found'}), 404
        return jsonify(repo.get_by_id(entry_id))

    @bp.route('/<int:entry_id>', methods=['DELETE'])
    @require_api_key
    def delete_memory(entry_id: int):
        if not MemoryRepository().delete(entry_id):
            return jsonify({'error': 'Memory entry not found'}), 404
        return jsonify({'message': 'Memory entry deleted'})

    @bp.route('/import-tmx', methods=['POST'])
    @require_api_key
    def import_memory_tmx():
        file, filename, error = _uploaded_file(('.tmx',))
        if error:
            return jsonify({'error': error}), 400
        entries = tmx_to_memory(parse_tmx(file.read()))
        imported = MemoryRepository().insert_many([e.to_row() for e in entries])
        logger.info(f"Imported {imported} memory entries from {filename}")
        return jsonify({'imported': imported, 'filename': filename})

    return bp


def create_terminology_blueprint() -> Blueprint:
    """Create terminology routes blueprint."""
    bp = Blueprint('terminology', __name__, url_prefix='/api/terminology')
    logger = get_channel('api')

    def _search():
        return TerminologyRepository().search(
            request.args.get('search', ''),
            request.args.get('source_lang', ''),
            request.args.get('target_lang', '')
        )

    @bp.route('', methods=['GET'])
    def list_terminology():
        return jsonify({'entries': _search()})

    @bp.route('', methods=['POST'])
    @require_api_key
    def add_term():
        data = _json_body()
        missing = _missing(data, 'term', 'translation', 'source_lang', 'target_lang')
        if missing:
            return jsonify({'error': f"Missing fields: {', '.join(missing)}"}), 400
        entry = TerminologyEntry(
            term=data['term'].strip(),
            translation=data['translation'].strip(),
            source_lang=data['source_lang'],
            target_lang=data['target_lang'],
            definition=data.get('definition') or '',
            category=data.get('category') or '',
            context=data.get('context') or ''
        )
        repo = TerminologyRepository()
        if not repo.upsert_entries([entry]):
            return jsonify({'error': 'Term pair already exists'}), 409
        row = repo.select_all(filter_equals=dict(zip(
            ('term', 'translation', 'source_lang', 'target_lang'), entry.key
        )))[0]
        return jsonify(row), 201

    @bp.route('/<int:entry_id>', methods=['PUT'])
    @require_api_key
    def update_term(entry_id: int):
        data = _json_body()
        repo = TerminologyRepository()
        changes = {k: v for k, v in data.items() if k in repo.fields}
        if not repo.update(entry_id, changes):
            return jsonify({'error': 'Term not found'}), 404
        return jsonify(repo.get_by_id(entry_id))

    @bp.route('/<int:entry_id>', methods=['DELETE'])
    @require_api_key
    def delete_term(entry_id: int):
        if not TerminologyRepository().delete(entry_id):
            return jsonify({'error': 'Term not found'}), 404
        return jsonify({'message': 'Term deleted'})

    @bp.route('/export', methods=['GET'])
    def export_terminology():
        csv_text = export_terminology_csv(_search())
        return Response(
            csv_text,
            mimetype='text/csv',
            headers={'Content-Disposition': 'attachment; filename=terminology.csv'}
        )

    @bp.route('/import-tmx', methods=['POST'])
    @require_api_key
    def import_terminology_tmx():
        file, filename, error = _uploaded_file(('.tmx',))
        if error:
            return jsonify({'error': error}), 400
        entries = tmx_to_terminology(parse_tmx(file.read()), filename)
        imported = TerminologyRepository().upsert_entries(entries)
        logger.info(f"Imported {imported} of {len(entries)} terms from {filename}")
        return jsonify({'imported': imported, 'skipped': len(entries) - imported, 'filename': filename})

    return bp


def _check_rules(rules) -> None:
    try:
        FormattingRuleSet.from_dict(rules)
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise ImportFormatError(f"Invalid formatting rules: {e}")


def create_rules_blueprint() -> Blueprint:
    """Create formatting-rule routes blueprint."""
    bp = Blueprint('rules', __name__, url_prefix='/api/rules')
    logger = get_channel('api')

    @bp.route('', methods=['GET'])
    def list_rules():
        return jsonify({'rules': FormattingRuleRepository().select_all()})

    @bp.route('/<int:rule_id>', methods=['GET'])
    def get_rule(rule_id: int):
        row = FormattingRuleRepository().get_by_id(rule_id)
        if not row:
            return jsonify({'error': 'Formatting rule not found'}), 404
        return jsonify(row)

    @bp.route('', methods=['POST'])
    @require_api_key
    def create_rule():
        """Create a rule set from a JSON body or an uploaded .json file."""
        if 'file' in request.files:
            file, filename, error = _uploaded_file(('.json',))
            if error:
                return jsonify({'error': error}), 400
            imported = parse_rule_set_json(file.read())
            name = imported['name'] or Path(filename).stem
            description = imported['description']
            rules = imported['rules_json']
            make_default = False
        else:
            data = _json_body()
            if _missing(data, 'name'):
                return jsonify({'error': 'Missing fields: name'}), 400
            name = data['name']
            description = data.get('description') or ''
            rules = data.get('rules_json') or {}
            make_default = bool(data.get('is_default'))

        _check_rules(rules)
        row = FormattingRuleRepository().create(name, rules, description, is_default=make_default)
        logger.info(f"Formatting rule '{name}' created (id {row['id']})")
        return jsonify(row), 201

    @bp.route('/<int:rule_id>', methods=['PUT'])
    @require_api_key
    def update_rule(rule_id: int):
        data = _json_body()
        repo = FormattingRuleRepository()
        changes = {k: v for k, v in data.items() if k in repo.fields}
        if 'rules_json' in changes:
            _check_rules(changes['rules_json'])
        if not repo.update(rule_id, changes):
            return jsonify({'error': 'Formatting rule not found'}), 404
        return jsonify(repo.get_by_id(rule_id))

    @bp.route('/<int:rule_id>', methods=['DELETE'])
    @require_api_key
    def delete_rule(rule_id: int):
        if not FormattingRuleRepository().delete(rule_id):
            return jsonify({'error': 'Formatting rule not found'}), 404
        return jsonify({'message': 'Formatting rule deleted'})

    @bp.route('/<int:rule_id>/default', methods=['POST'])
    @require_api_key
    def set_default_rule(rule_id: int):
        repo = FormattingRuleRepository()
        if not repo.set_default(rule_id):
            return jsonify({'error': 'Formatting rule not found'}), 404
        return jsonify(repo.get_by_id(rule_id))

    @bp.route('/<int:rule_id>/export', methods=['GET'])
    def export_rule(rule_id: int):
        row = FormattingRuleRepository().get_by_id(rule_id)
        if not row:
            return jsonify({'error': 'Formatting rule not found'}), 404
        filename = f"{row['name'].replace(' ', '_')}.json"
        return Response(
            export_rule_set_json(row),
            mimetype='application/json',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'}
        )

    return bp


def create_settings_blueprint() -> Blueprint:
    """Create settings, health and language routes blueprint."""
    bp = Blueprint('settings', __name__, url_prefix='/api')

    def _public_settings(values: dict) -> dict:
        return {
            'has_api_key': bool(values.get('gemini_api_key') or config.gemini.api_key),
            'linguistic_rules': values.get('linguistic_rules') or '',
            'punctuation_rules': values.get('punctuation_rules') or '',
        }

    @bp.route('/settings', methods=['GET'])
    def get_settings():
        return jsonify(_public_settings(SettingsRepository().get_all()))

    @bp.route('/settings', methods=['PUT'])
    @require_api_key
    def update_settings():
        data = _json_body()
        unknown = [k for k in data if k not in SETTING_KEYS]
        if unknown:
            return jsonify({'error': f"Unknown settings: {', '.join(unknown)}"}), 400
        repo = SettingsRepository()
        for key, value in data.items():
            repo.set(key, value)
        return jsonify(_public_settings(repo.get_all()))

    @bp.route('/health', methods=['GET'])
    def health_check():
        gemini_configured = bool(config.gemini.api_key)
        try:
            get_database().fetchone("SELECT 1")
            database = 'connected'
            gemini_configured = gemini_configured or bool(SettingsRepository().get('gemini_api_key'))
        except sqlite3.Error as e:
            get_channel('api').error(f"Health check database error: {e}")
            database = 'unavailable'

        return jsonify({
            'status': 'healthy' if database == 'connected' else 'degraded',
            'database': database,
            'gemini_configured': gemini_configured,
            'version': __version__
        })

    @bp.route('/languages', methods=['GET'])
    def list_languages():
        """List supported languages."""
        code = request.args.get('code')
        if code:
            valid, error = validate_language(code)
            return jsonify({'code': code, 'supported': valid, 'error': error})
        return jsonify({'languages': SUPPORTED_LANGUAGES})

    return bp


def create_logs_blueprint() -> Blueprint:
    """Create logs routes blueprint for the console panel."""
    bp = Blueprint('logs', __name__)

    @bp.route('/logs', methods=['GET'])
    def get_logs():
        """Recent pipeline events; ?since=<id> and ?channel=<name> narrow the list."""
        since_id = request.args.get('since', 0, type=int)
        channel = request.args.get('channel') or None
        if channel is not None and channel not in CHANNELS:
            return jsonify({'error': f"Unknown channel: {channel}", 'channels': list(CHANNELS)}), 400
        return jsonify({'logs': event_buffer.entries(since_id, channel)})

    @bp.route('/logs/clear', methods=['POST'])
    def clear_logs():
        """Clear the log buffer."""
        event_buffer.clear()
        return jsonify({'message': 'Logs cleared'})

    return bp
