"""
Logging Utilities
=================
One logger per pipeline stage, each writing its own rotating file, plus the
in-memory event buffer served at /logs.

Channels:
    app          startup and unhandled errors
    api          request handling, rate limiting, auth
    storage      sqlite connection and repositories
    provider     Gemini requests and responses
    dispatch     chunk scheduling, retries and permanent failures
    translation  chunking, job orchestration, term learning
    render       classification and HTML/DOCX export
    interchange  TMX, rule-set JSON, CSV and upload text extraction
"""
import os
import logging
from collections import deque
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import List, Dict, Optional
from trados_translator.config import config

LOGGER_PREFIX = 'trados_translator'

CHANNELS = (
    'app',
    'api',
    'storage',
    'provider',
    'dispatch',
    'translation',
    'render',
    'interchange',
)


class EventBuffer(logging.Handler):
    """
    Ring buffer of recent pipeline events.

    Attached to every channel logger, so anything a stage logs is visible
    at /logs tagged with the channel it came from.
    """

    def __init__(self, max_size: int = None):
        super().__init__(level=logging.DEBUG)
        self.events = deque(maxlen=max_size or config.logging.log_buffer_size)
        self.last_id = 0

    def push(self, level: str, channel: str, message: str) -> Dict:
        with self.lock:
            self.last_id += 1
            event = {
                'id': self.last_id,
                'timestamp': datetime.now().strftime('%H:%M:%S.%f')[:-3],
                'level': level,
                'channel': channel,
                'message': message
            }
            self.events.append(event)
            return event

    def emit(self, record: logging.LogRecord):
        channel = record.name.rsplit('.', 1)[-1]
        self.push(record.levelname, channel, record.getMessage())

    def entries(self, since_id: int = 0, channel: Optional[str] = None) -> List[Dict]:
        """Events newer than ``since_id``, optionally from one channel only."""
        with self.lock:
            return [
                e for e in self.events
                if e['id'] > since_id and (channel is None or e['channel'] == channel)
            ]

    def clear(self):
        with self.lock:
            self.events.clear()
            self.last_id = 0


event_buffer = EventBuffer()


def _configure(logger: logging.Logger, channel: str):
    level = logging.DEBUG if config.logging.verbose_debug else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    log_dir = config.paths.log_folder
    os.makedirs(log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, f'{channel}.log'),
        maxBytes=config.logging.log_file_max_bytes,
        backupCount=config.logging.log_file_backup_count,
        encoding='utf-8'
    )
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        f'%(asctime)s - {channel:<11} - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(console_handler)

    logger.addHandler(event_buffer)


def get_channel(channel: str) -> logging.Logger:
    """
    Get the logger for a pipeline stage, configuring it on first use.

    Raises:
        ValueError: unknown channel name
    """
    if channel not in CHANNELS:
        raise ValueError(f"Unknown log channel: {channel}")
    logger = logging.getLogger(f'{LOGGER_PREFIX}.{channel}')
    if not logger.handlers:
        _configure(logger, channel)
    return logger


def debug_print(message: str, channel: str = 'app', level: str = 'DEBUG'):
    """
    Record a fine-grained pipeline trace.

    Always lands in the event buffer; with VERBOSE_DEBUG it also goes
    through the channel logger to the console and the channel's file.
    """
    if config.logging.verbose_debug:
        get_channel(channel).log(logging.getLevelName(level), message)
    else:
        event_buffer.push(level, channel, message)
