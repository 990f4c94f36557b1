"""
Unit Tests for Pipeline Log Channels
"""
import asyncio
import logging

import pytest

from trados_translator.errors import ProviderError
from trados_translator.models.translation import Chunk
from trados_translator.services.dispatcher import ChunkDispatcher
from trados_translator.utils.logging import (
    CHANNELS,
    EventBuffer,
    debug_print,
    event_buffer,
    get_channel
)


@pytest.fixture(autouse=True)
def clean_buffer():
    event_buffer.clear()
    yield
    event_buffer.clear()


async def no_sleep(delay):
    pass


class TestChannels:

    def test_logger_names(self):
        for channel in CHANNELS:
            assert get_channel(channel).name == f"trados_translator.{channel}"

    def test_configured_once(self):
        logger = get_channel('render')
        handler_count = len(logger.handlers)
        assert get_channel('render') is logger
        assert len(logger.handlers) == handler_count
        assert event_buffer in logger.handlers

    def test_unknown_channel(self):
        with pytest.raises(ValueError):
            get_channel('metrics')

    def test_records_tagged_with_channel(self):
        get_channel('provider').warning("Gemini returned 503")
        events = event_buffer.entries()
        assert events[-1]['channel'] == 'provider'
        assert events[-1]['level'] == 'WARNING'
        assert events[-1]['message'] == "Gemini returned 503"

    def test_dispatch_retries_land_on_dispatch_channel(self):
        async def always_fails(text):
            raise ProviderError(500, "boom")

        dispatcher = ChunkDispatcher(max_concurrency=1, max_attempts=2, sleep=no_sleep)
        asyncio.run(dispatcher.translate_all([Chunk(index=0, text="x")], always_fails))

        dispatch = event_buffer.entries(channel='dispatch')
        levels = [e['level'] for e in dispatch]
        assert levels.count('WARNING') == 2
        assert 'ERROR' in levels
        assert any("permanently failed" in e['message'] for e in dispatch)
        assert not event_buffer.entries(channel='render')


class TestEventBuffer:

    def test_since_and_channel_filters(self):
        buffer = EventBuffer(max_size=10)
        buffer.push('INFO', 'dispatch', "one")
        buffer.push('INFO', 'render', "two")
        buffer.push('ERROR', 'dispatch', "three")

        assert [e['message'] for e in buffer.entries(since_id=1)] == ["two", "three"]
        assert [e['message'] for e in buffer.entries(channel='dispatch')] == ["one", "three"]
        assert [e['message'] for e in buffer.entries(since_id=1, channel='dispatch')] == ["three"]

    def test_bounded(self):
        buffer = EventBuffer(max_size=2)
        for i in range(5):
            buffer.push('INFO', 'app', str(i))
        entries = buffer.entries()
        assert [e['message'] for e in entries] == ["3", "4"]
        assert entries[-1]['id'] == 5

    def test_clear_resets_ids(self):
        buffer = EventBuffer(max_size=5)
        buffer.push('INFO', 'app', "a")
        buffer.clear()
        assert buffer.entries() == []
        assert buffer.push('INFO', 'app', "b")['id'] == 1

    def test_emit_uses_last_name_segment(self):
        buffer = EventBuffer(max_size=5)
        record = logging.LogRecord(
            'trados_translator.storage', logging.INFO, __file__, 1, "saved %d rows", (3,), None
        )
        buffer.emit(record)
        assert buffer.entries()[0]['channel'] == 'storage'
        assert buffer.entries()[0]['message'] == "saved 3 rows"


class TestDebugPrint:

    def test_trace_goes_to_buffer(self):
        debug_print("Split text into 3 chunks", 'translation')
        event = event_buffer.entries()[-1]
        assert event['channel'] == 'translation'
        assert event['level'] == 'DEBUG'

    def test_level_kept(self):
        debug_print("Parsed 2 translation units", 'interchange', 'INFO')
        assert event_buffer.entries(channel='interchange')[-1]['level'] == 'INFO'
