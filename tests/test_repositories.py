"""
Unit Tests for the Database Repositories
"""
import pytest

from trados_translator.config.constants import DEFAULT_RULES, DEFAULT_RULE_NAME
from trados_translator.database.repositories import (
    MemoryRepository,
    TerminologyRepository,
    FormattingRuleRepository,
    SettingsRepository
)
from trados_translator.models.records import TerminologyEntry


def term_row(term, translation, definition="", source_lang="en", target_lang="mk"):
    return {
        'term': term,
        'translation': translation,
        'definition': definition,
        'source_lang': source_lang,
        'target_lang': target_lang,
        'category': 'Manual',
    }


class TestMemoryRepository:

    def test_add_and_get(self, db):
        repo = MemoryRepository(db)
        row = repo.add("Hello", "Здраво", "en", "mk")
        assert row['id'] is not None
        assert repo.get_by_id(row['id'])['target_text'] == "Здраво"
        assert repo.count() == 1

    def test_find_exemplars_most_recent_first(self, db):
        repo = MemoryRepository(db)
        for i in range(5):
            repo.add(f"source {i}", f"target {i}", "en", "mk")
        repo.add("other", "other", "en", "hr")

        exemplars = repo.find_exemplars("en", "mk", 3)
        assert [e['source_text'] for e in exemplars] == ["source 4", "source 3", "source 2"]

    def test_limit_and_offset(self, db):
        repo = MemoryRepository(db)
        for i in range(5):
            repo.add(f"source {i}", f"target {i}", "en", "mk")
        page = repo.select_all(limit=2, offset=2)
        assert [e['source_text'] for e in page] == ["source 2", "source 1"]

    def test_update_and_delete(self, db):
        repo = MemoryRepository(db)
        row = repo.add("Hello", "Здраво", "en", "mk")
        assert repo.update(row['id'], {'target_text': "Поздрав"}) is True
        assert repo.get_by_id(row['id'])['target_text'] == "Поздрав"
        assert repo.delete(row['id']) is True
        assert repo.get_by_id(row['id']) is None

    def test_update_missing_row(self, db):
        repo = MemoryRepository(db)
        assert repo.update(999, {'target_text': "x"}) is False
        assert repo.delete(999) is False

    def test_unknown_filter_column(self, db):
        repo = MemoryRepository(db)
        with pytest.raises(ValueError):
            repo.select_all(filter_equals={'source_lang; DROP TABLE x': 'en'})

    def test_unknown_order_column(self, db):
        repo = MemoryRepository(db)
        with pytest.raises(ValueError):
            repo.select_all(order_by='nope')

    def test_unknown_insert_column(self, db):
        repo = MemoryRepository(db)
        with pytest.raises(ValueError):
            repo.insert({'source_text': 'a', 'bogus': 'b'})

    def test_insert_many_is_atomic(self, db):
        repo = MemoryRepository(db)
        rows = [
            {'source_text': 'a', 'target_text': 'b', 'source_lang': 'en', 'target_lang': 'mk'},
            {'source_text': 'c', 'bogus': 'd'},
        ]
        with pytest.raises(ValueError):
            repo.insert_many(rows)
        assert repo.count() == 0


class TestTerminologyRepository:

    def test_upsert_skips_existing(self, db):
        repo = TerminologyRepository(db)
        key = ('term', 'translation', 'source_lang', 'target_lang')
        assert repo.upsert([term_row("court", "суд")], key) == 1
        assert repo.upsert([term_row("court", "суд", definition="changed")], key) == 0
        assert repo.count() == 1
        assert repo.select_all()[0]['definition'] == ""

    def test_upsert_update(self, db):
        repo = TerminologyRepository(db)
        key = ('term', 'translation', 'source_lang', 'target_lang')
        repo.upsert([term_row("court", "суд")], key)
        assert repo.upsert([term_row("court", "суд", definition="judicial body")], key, update=True) == 1
        assert repo.select_all()[0]['definition'] == "judicial body"

    def test_same_term_other_translation_is_new(self, db):
        repo = TerminologyRepository(db)
        key = ('term', 'translation', 'source_lang', 'target_lang')
        repo.upsert([term_row("court", "суд"), term_row("court", "трибунал")], key)
        assert repo.count() == 2

    def test_upsert_entries(self, db):
        repo = TerminologyRepository(db)
        entries = [
            TerminologyEntry("regulation", "регулатива", "en", "mk"),
            TerminologyEntry("regulation", "регулатива", "en", "mk"),
        ]
        assert repo.upsert_entries(entries) == 1
        assert repo.upsert_entries([]) == 0

    def test_search_is_or_across_columns(self, db):
        repo = TerminologyRepository(db)
        repo.insert(term_row("court", "суд"))
        repo.insert(term_row("tribunal", "трибунал", definition="a kind of court"))
        repo.insert(term_row("directive", "директива"))

        found = repo.search("court")
        assert sorted(r['term'] for r in found) == ["court", "tribunal"]

    def test_search_case_insensitive(self, db):
        repo = TerminologyRepository(db)
        repo.insert(term_row("Commission", "Комисија"))
        assert len(repo.search("commission")) == 1

    def test_search_language_filter(self, db):
        repo = TerminologyRepository(db)
        repo.insert(term_row("court", "суд"))
        repo.insert(term_row("court", "sud", target_lang="hr"))
        found = repo.search("court", target_lang="hr")
        assert [r['translation'] for r in found] == ["sud"]

    def test_search_escapes_wildcards(self, db):
        repo = TerminologyRepository(db)
        repo.insert(term_row("100% share", "100% удел"))
        repo.insert(term_row("share", "удел"))
        assert [r['term'] for r in repo.search("%")] == ["100% share"]

    def test_ordered_by_term(self, db):
        repo = TerminologyRepository(db)
        repo.insert(term_row("zeta", "z"))
        repo.insert(term_row("alpha", "a"))
        assert [r['term'] for r in repo.for_language_pair("en", "mk")] == ["alpha", "zeta"]


class TestFormattingRuleRepository:

    def test_create_round_trips_json(self, db):
        repo = FormattingRuleRepository(db)
        created = repo.create("Custom", {"fonts": {"main": {"size": 11}}}, "desc")
        assert created['rules_json'] == {"fonts": {"main": {"size": 11}}}
        assert created['is_default'] is False
        assert created['version'] == 1

    def test_update_bumps_version(self, db):
        repo = FormattingRuleRepository(db)
        created = repo.create("Custom", {})
        assert repo.update(created['id'], {'name': "Renamed"}) is True
        updated = repo.get_by_id(created['id'])
        assert updated['name'] == "Renamed"
        assert updated['version'] == 2

    def test_update_missing(self, db):
        repo = FormattingRuleRepository(db)
        assert repo.update(42, {'name': "x"}) is False

    def test_single_default(self, db):
        repo = FormattingRuleRepository(db)
        first = repo.create("First", {}, is_default=True)
        second = repo.create("Second", {}, is_default=True)

        defaults = [r for r in repo.select_all() if r['is_default']]
        assert [r['id'] for r in defaults] == [second['id']]
        assert repo.get_default()['id'] == second['id']

        assert repo.set_default(first['id']) is True
        defaults = [r for r in repo.select_all() if r['is_default']]
        assert [r['id'] for r in defaults] == [first['id']]

    def test_set_default_unknown_keeps_current(self, db):
        repo = FormattingRuleRepository(db)
        current = repo.create("Current", {}, is_default=True)
        assert repo.set_default(999) is False
        assert repo.get_default()['id'] == current['id']

    def test_update_can_make_default(self, db):
        repo = FormattingRuleRepository(db)
        first = repo.create("First", {}, is_default=True)
        second = repo.create("Second", {})
        repo.update(second['id'], {'is_default': True})
        assert repo.get_default()['id'] == second['id']
        assert repo.get_by_id(first['id'])['is_default'] is False

    def test_ensure_default_seeds_once(self, db):
        repo = FormattingRuleRepository(db)
        seeded = repo.ensure_default()
        assert seeded['name'] == DEFAULT_RULE_NAME
        assert seeded['rules_json'] == DEFAULT_RULES
        assert seeded['is_default'] is True

        repo.ensure_default()
        assert repo.count() == 1

    def test_ensure_default_without_default_row(self, db):
        repo = FormattingRuleRepository(db)
        repo.create('Custom', {'tabs': {}})
        assert repo.ensure_default() is None
        assert repo.count() == 1


class TestSettingsRepository:

    def test_get_default(self, db):
        repo = SettingsRepository(db)
        assert repo.get("missing") is None
        assert repo.get("missing", "fallback") == "fallback"

    def test_set_overwrites(self, db):
        repo = SettingsRepository(db)
        repo.set("gemini_api_key", "one")
        repo.set("gemini_api_key", "two")
        assert repo.get("gemini_api_key") == "two"
        assert repo.get_all() == {"gemini_api_key": "two"}
