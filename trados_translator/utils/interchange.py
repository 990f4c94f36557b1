"""
Interchange Formats
===================
Reading and writing the file formats exchanged with other CAT tools:
TMX translation memories, rule-set JSON, terminology CSV and the source
documents a job can start from.
"""
import csv
import io
import json
from datetime import datetime
from typing import List, Dict, Any, Iterable, Optional, Union

import pdfplumber
from docx import Document
from lxml import etree

from trados_translator.config.constants import TMX_IMPORT_CATEGORY
from trados_translator.errors import ImportFormatError
from trados_translator.models.records import TmxEntry, TerminologyEntry, MemoryEntry
from trados_translator.utils.logging import get_channel, debug_print

XML_LANG = '{http://www.w3.org/XML/1998/namespace}lang'

TERMINOLOGY_CSV_COLUMNS = (
    'term', 'translation', 'source_lang', 'target_lang',
    'category', 'definition', 'created_at'
)


def _to_bytes(content: Union[str, bytes]) -> bytes:
    return content.encode('utf-8') if isinstance(content, str) else content


def _first_text(element, tag: str) -> Optional[str]:
    found = element.find(f'.//{{*}}{tag}')
    if found is None:
        return None
    text = ''.join(found.itertext()).strip()
    return text or None


def _tuv_lang(tuv, default: str) -> str:
    lang = tuv.get(XML_LANG) or tuv.get('lang') or default
    return lang.split('-')[0].lower()


def parse_tmx(content: Union[str, bytes]) -> List[TmxEntry]:
    """
    Parse a TMX document.

    Each ``tu`` contributes its first two ``tuv`` variants as source and
    target. Units without both segments are skipped.

    Raises:
        ImportFormatError: content is not XML or has no ``tmx`` root
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(_to_bytes(content), parser)
    except etree.XMLSyntaxError as e:
        raise ImportFormatError(f"Invalid TMX file format: {e}")

    if etree.QName(root).localname != 'tmx':
        raise ImportFormatError("Invalid TMX file format: missing <tmx> root element")

    entries = []
    for tu in root.iter('{*}tu'):
        tuvs = tu.findall('{*}tuv')
        if len(tuvs) < 2:
            continue
        source_tuv, target_tuv = tuvs[0], tuvs[1]

        source = _first_text(source_tuv, 'seg')
        target = _first_text(target_tuv, 'seg')
        if not source or not target:
            continue

        entries.append(TmxEntry(
            source=source,
            target=target,
            source_lang=_tuv_lang(source_tuv, 'en'),
            target_lang=_tuv_lang(target_tuv, 'mk'),
            context=_first_text(source_tuv, 'context') or _first_text(tu, 'context'),
            note=_first_text(tu, 'note'),
        ))

    debug_print(f"Parsed {len(entries)} translation units", 'interchange', 'INFO')
    return entries


def tmx_to_memory(entries: Iterable[TmxEntry]) -> List[MemoryEntry]:
    return [
        MemoryEntry(
            source_text=entry.source,
            target_text=entry.target,
            source_lang=entry.source_lang,
            target_lang=entry.target_lang,
            context=entry.context or entry.note or "",
        )
        for entry in entries
    ]


def tmx_to_terminology(entries: Iterable[TmxEntry], filename: str) -> List[TerminologyEntry]:
    imported_at = datetime.now().isoformat(timespec='seconds')
    return [
        TerminologyEntry(
            term=entry.source,
            translation=entry.target,
            source_lang=entry.source_lang,
            target_lang=entry.target_lang,
            definition=entry.note or "",
            category=TMX_IMPORT_CATEGORY,
            context=entry.context or "",
            imported_from=filename,
            imported_at=imported_at,
        )
        for entry in entries
    ]


def parse_rule_set_json(content: Union[str, bytes]) -> Dict[str, Any]:
    """
    Parse an imported rule set.

    Accepts either a bare rules object or a previously exported row with
    ``name``/``description``/``rules_json`` keys.

    Returns:
        Dict with ``name``, ``description`` and ``rules_json``
    """
    try:
        data = json.loads(content)
    except (ValueError, TypeError) as e:
        raise ImportFormatError(f"Invalid rule set JSON: {e}")

    if not isinstance(data, dict):
        raise ImportFormatError("Invalid rule set JSON: expected an object")

    if 'rules_json' in data:
        rules = data['rules_json']
        if isinstance(rules, str):
            try:
                rules = json.loads(rules)
            except ValueError as e:
                raise ImportFormatError(f"Invalid rule set JSON: {e}")
        if not isinstance(rules, dict):
            raise ImportFormatError("Invalid rule set JSON: rules_json must be an object")
        return {
            'name': data.get('name'),
            'description': data.get('description') or "",
            'rules_json': rules,
        }

    return {'name': None, 'description': "", 'rules_json': data}


def export_rule_set_json(row: Dict[str, Any]) -> str:
    """Serialize a stored rule set for download."""
    exported = {
        'name': row.get('name'),
        'description': row.get('description') or "",
        'version': row.get('version'),
        'rules_json': row.get('rules_json') or {},
    }
    return json.dumps(exported, ensure_ascii=False, indent=2)


def export_terminology_csv(rows: Iterable[Dict[str, Any]]) -> str:
    """Serialize terminology rows as CSV with a header line."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=TERMINOLOGY_CSV_COLUMNS, extrasaction='ignore')
    writer.writeheader()
    for row in rows:
        writer.writerow({name: row.get(name) or "" for name in TERMINOLOGY_CSV_COLUMNS})
    return buffer.getvalue()


def extract_text(filename: str, data: bytes) -> str:
    """
    Extract plain text from an uploaded document.

    Args:
        filename: Original filename; its extension selects the reader
        data: Raw file content

    Returns:
        Extracted text; paragraphs separated by blank lines
    """
    logger = get_channel('interchange')
    suffix = filename.lower().rsplit('.', 1)[-1] if '.' in filename else ''

    if suffix == 'txt':
        text = data.decode('utf-8-sig', errors='replace')
    elif suffix == 'docx':
        try:
            document = Document(io.BytesIO(data))
        except Exception as e:
            raise ImportFormatError(f"Could not read DOCX file: {e}")
        text = "\n\n".join(p.text for p in document.paragraphs if p.text.strip())
    elif suffix == 'pdf':
        text_parts = []
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                for page in pdf.pages:
                    page_text = page.extract_text() or ""
                    if page_text.strip():
                        text_parts.append(page_text)
        except Exception as e:
            raise ImportFormatError(f"Could not read PDF file: {e}")
        text = "\n\n".join(text_parts)
    else:
        raise ImportFormatError(f"Unsupported file type: .{suffix}" if suffix else "Unsupported file type")

    logger.info(f"Extracted {len(text):,} characters from {filename}")
    return text
