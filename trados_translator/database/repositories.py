"""
Database Repositories
=====================
Record-oriented access to the memory, terminology, rule-set and settings stores.
"""
import json
from typing import Optional, List, Dict, Any, Iterable, Sequence, Tuple

from trados_translator.config.constants import (
    DEFAULT_RULES,
    DEFAULT_RULE_NAME,
    DEFAULT_RULE_DESCRIPTION,
    TERMINOLOGY_KEY
)
from trados_translator.database.connection import Database, get_database
from trados_translator.models.records import TerminologyEntry
from trados_translator.utils.logging import get_channel


def _escape_like(pattern: str) -> str:
    return pattern.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class BaseRepository:
    """
    Generic CRUD over one table.

    Column names are checked against ``fields`` (writable) and
    ``readonly_fields`` before they reach any SQL string.
    """

    table: str = ''
    fields: Tuple[str, ...] = ()
    readonly_fields: Tuple[str, ...] = ('id', 'created_at', 'updated_at')
    default_order: str = 'created_at'
    default_descending: bool = True

    def __init__(self, database: Database = None):
        self.db = database or get_database()
        self.logger = get_channel('storage')

    @property
    def columns(self) -> Tuple[str, ...]:
        return self.fields + self.readonly_fields

    def _check_columns(self, names: Iterable[str], writable: bool = False) -> None:
        allowed = self.fields if writable else self.columns
        unknown = [name for name in names if name not in allowed]
        if unknown:
            raise ValueError(f"Unknown column(s) for {self.table}: {', '.join(unknown)}")

    def _row_to_dict(self, row) -> Dict[str, Any]:
        return dict(row)

    def _prepare(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for subclasses to serialize values before writing."""
        return row

    def select_all(
        self,
        filter_equals: Optional[Dict[str, Any]] = None,
        filter_substring: Optional[Dict[str, str]] = None,
        order_by: Optional[str] = None,
        descending: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        """
        Query rows.

        Equality filters are AND-ed; substring filters are OR-ed together
        (case-insensitive) and AND-ed with the equality filters.
        """
        clauses: List[str] = []
        params: List[Any] = []

        equals = filter_equals or {}
        self._check_columns(equals)
        for name, value in equals.items():
            clauses.append(f"{name} = ?")
            params.append(value)

        substring = {k: v for k, v in (filter_substring or {}).items() if v}
        self._check_columns(substring)
        if substring:
            alternatives = []
            for name, pattern in substring.items():
                alternatives.append(f"{name} LIKE ? ESCAPE '\\'")
                params.append(f"%{_escape_like(pattern)}%")
            clauses.append("(" + " OR ".join(alternatives) + ")")

        order = order_by or self.default_order
        self._check_columns([order])
        direction = 'DESC' if (self.default_descending if descending is None else descending) else 'ASC'

        query = f"SELECT * FROM {self.table}"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += f" ORDER BY {order} {direction}, id {direction}"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        rows = self.db.fetchall(query, tuple(params))
        return [self._row_to_dict(row) for row in rows]

    def get_by_id(self, row_id: int) -> Optional[Dict[str, Any]]:
        row = self.db.fetchone(f"SELECT * FROM {self.table} WHERE id = ?", (row_id,))
        return self._row_to_dict(row) if row else None

    def count(self) -> int:
        row = self.db.fetchone(f"SELECT COUNT(*) AS total FROM {self.table}")
        return row['total'] if row else 0

    def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""
        with self.db.transaction() as conn:
            row_id = self._insert(conn, row)
        self.logger.debug(f"Inserted {self.table} row {row_id}")
        return self.get_by_id(row_id)

    def insert_many(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Insert all rows in one transaction; nothing is written if one fails."""
        with self.db.transaction() as conn:
            for row in rows:
                self._insert(conn, row)
        self.logger.info(f"Inserted {len(rows)} {self.table} rows")
        return len(rows)

    def _insert(self, conn, row: Dict[str, Any]) -> int:
        row = self._prepare(dict(row))
        self._check_columns(row, writable=True)
        names = list(row)
        placeholders = ", ".join("?" for _ in names)
        cursor = conn.execute(
            f"INSERT INTO {self.table} ({', '.join(names)}) VALUES ({placeholders})",
            tuple(row[name] for name in names)
        )
        return cursor.lastrowid

    def update(self, row_id: int, partial: Dict[str, Any]) -> bool:
        """Update the given columns of one row."""
        partial = self._prepare(dict(partial))
        partial.pop('id', None)
        self._check_columns(partial, writable=True)
        if not partial:
            return self.get_by_id(row_id) is not None

        assignments = ", ".join(f"{name} = ?" for name in partial)
        with self.db.transaction() as conn:
            cursor = conn.execute(
                f"UPDATE {self.table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                tuple(partial.values()) + (row_id,)
            )
            return cursor.rowcount > 0

    def delete(self, row_id: int) -> bool:
        with self.db.transaction() as conn:
            cursor = conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (row_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            self.logger.info(f"Deleted {self.table} row {row_id}")
        return deleted

    def upsert(
        self,
        rows: Sequence[Dict[str, Any]],
        conflict_keys: Sequence[str],
        update: bool = False
    ) -> int:
        """
        Insert rows, resolving uniqueness conflicts on ``conflict_keys``.

        Conflicting rows are left untouched unless ``update`` is set, in which
        case their non-key columns are overwritten. Returns the number of rows
        written.
        """
        self._check_columns(conflict_keys, writable=True)
        written = 0
        with self.db.transaction() as conn:
            for row in rows:
                row = self._prepare(dict(row))
                self._check_columns(row, writable=True)
                names = list(row)
                query = (
                    f"INSERT INTO {self.table} ({', '.join(names)}) "
                    f"VALUES ({', '.join('?' for _ in names)}) "
                    f"ON CONFLICT ({', '.join(conflict_keys)}) "
                )
                updates = [name for name in names if name not in conflict_keys]
                if update and updates:
                    query += "DO UPDATE SET " + ", ".join(
                        f"{name} = excluded.{name}" for name in updates
                    ) + ", updated_at = CURRENT_TIMESTAMP"
                else:
                    query += "DO NOTHING"
                cursor = conn.execute(query, tuple(row[name] for name in names))
                written += cursor.rowcount
        return written


class MemoryRepository(BaseRepository):
    """Translation-memory store."""

    table = 'translation_memory'
    fields = ('source_text', 'target_text', 'source_lang', 'target_lang', 'context')

    def find_exemplars(self, source_lang: str, target_lang: str, limit: int) -> List[Dict[str, Any]]:
        """Most recent pairs for a language pair."""
        return self.select_all(
            filter_equals={'source_lang': source_lang, 'target_lang': target_lang},
            limit=limit
        )

    def add(self, source_text: str, target_text: str, source_lang: str,
            target_lang: str, context: str = "") -> Dict[str, Any]:
        return self.insert({
            'source_text': source_text,
            'target_text': target_text,
            'source_lang': source_lang,
            'target_lang': target_lang,
            'context': context,
        })


class TerminologyRepository(BaseRepository):
    """Terminology store; one row per (term, translation, source_lang, target_lang)."""

    table = 'terminology'
    fields = (
        'term', 'translation', 'definition', 'source_lang', 'target_lang',
        'category', 'context', 'imported_from', 'imported_at'
    )
    default_order = 'term'
    default_descending = False

    def for_language_pair(self, source_lang: str, target_lang: str) -> List[Dict[str, Any]]:
        return self.select_all(filter_equals={'source_lang': source_lang, 'target_lang': target_lang})

    def search(
        self,
        query: str = "",
        source_lang: str = "",
        target_lang: str = ""
    ) -> List[Dict[str, Any]]:
        """Search term, translation and definition; optionally filter by language."""
        equals = {}
        if source_lang:
            equals['source_lang'] = source_lang
        if target_lang:
            equals['target_lang'] = target_lang
        substring = {'term': query, 'translation': query, 'definition': query} if query else None
        return self.select_all(filter_equals=equals, filter_substring=substring)

    def upsert_entries(self, entries: Iterable[TerminologyEntry], update: bool = False) -> int:
        """Upsert entries on the uniqueness key; already-known pairs are skipped."""
        rows = [entry.to_row() for entry in entries]
        if not rows:
            return 0
        written = self.upsert(rows, TERMINOLOGY_KEY, update=update)
        self.logger.info(f"Terminology upsert: {written} of {len(rows)} rows written")
        return written


class FormattingRuleRepository(BaseRepository):
    """Formatting rule-set store."""

    table = 'formatting_rules'
    fields = ('name', 'description', 'rules_json', 'is_default')
    readonly_fields = ('id', 'version', 'created_at', 'updated_at')

    def _prepare(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if 'rules_json' in row and not isinstance(row['rules_json'], str):
            row['rules_json'] = json.dumps(row['rules_json'], ensure_ascii=False)
        if 'is_default' in row:
            row['is_default'] = 1 if row['is_default'] else 0
        return row

    def _row_to_dict(self, row) -> Dict[str, Any]:
        data = dict(row)
        data['rules_json'] = json.loads(data['rules_json'] or '{}')
        data['is_default'] = bool(data['is_default'])
        return data

    def create(self, name: str, rules: Dict[str, Any], description: str = "",
               is_default: bool = False) -> Dict[str, Any]:
        """Store a new rule set; making it default unsets the previous default."""
        created = self.insert({
            'name': name,
            'description': description,
            'rules_json': rules,
            'is_default': False,
        })
        if is_default:
            self.set_default(created['id'])
            created = self.get_by_id(created['id'])
        return created

    def update(self, row_id: int, partial: Dict[str, Any]) -> bool:
        """Update a rule set and bump its version."""
        partial = dict(partial)
        make_default = partial.pop('is_default', None)
        partial = self._prepare(partial)
        partial.pop('id', None)
        self._check_columns(partial, writable=True)

        with self.db.transaction() as conn:
            assignments = "".join(f"{name} = ?, " for name in partial)
            cursor = conn.execute(
                f"UPDATE {self.table} SET {assignments}version = version + 1, "
                f"updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                tuple(partial.values()) + (row_id,)
            )
            found = cursor.rowcount > 0

        if found and make_default:
            self.set_default(row_id)
        elif found and make_default is False:
            with self.db.transaction() as conn:
                conn.execute(f"UPDATE {self.table} SET is_default = 0 WHERE id = ?", (row_id,))
        return found

    def get_default(self) -> Optional[Dict[str, Any]]:
        row = self.db.fetchone(
            f"SELECT * FROM {self.table} WHERE is_default = 1 ORDER BY updated_at DESC, id DESC LIMIT 1"
        )
        return self._row_to_dict(row) if row else None

    def set_default(self, row_id: int) -> bool:
        """
        Make one rule set the default.

        Unset-others and set-this are two writes; running them in one
        transaction leaves exactly one default row afterwards.
        """
        with self.db.transaction() as conn:
            exists = conn.execute(
                f"SELECT 1 FROM {self.table} WHERE id = ?", (row_id,)
            ).fetchone()
            if not exists:
                return False
            conn.execute(f"UPDATE {self.table} SET is_default = 0 WHERE id != ?", (row_id,))
            conn.execute(
                f"UPDATE {self.table} SET is_default = 1, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (row_id,)
            )
        self.logger.info(f"Formatting rule {row_id} set as default")
        return True

    def ensure_default(self) -> Optional[Dict[str, Any]]:
        """
        Seed the built-in rule set when the store is empty.

        Returns the default row, or None when rule sets exist but none is default.
        """
        current = self.get_default()
        if current:
            return current
        if self.count() == 0:
            self.logger.info("Seeding default formatting rule set")
            return self.create(DEFAULT_RULE_NAME, DEFAULT_RULES, DEFAULT_RULE_DESCRIPTION, is_default=True)
        return None


class SettingsRepository:
    """Key/value store for local settings (API key, rule texts)."""

    def __init__(self, database: Database = None):
        self.db = database or get_database()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        row = self.db.fetchone("SELECT value FROM settings WHERE key = ?", (key,))
        return row['value'] if row and row['value'] is not None else default

    def set(self, key: str, value: Optional[str]) -> None:
        with self.db.transaction() as conn:
            conn.execute("""
                INSERT INTO settings (key, value) VALUES (?, ?)
                ON CONFLICT (key) DO UPDATE SET value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
            """, (key, value))

    def get_all(self) -> Dict[str, Optional[str]]:
        rows = self.db.fetchall("SELECT key, value FROM settings ORDER BY key")
        return {row['key']: row['value'] for row in rows}
