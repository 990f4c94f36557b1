"""
Error Types
===========
Exceptions raised across the translation pipeline.
"""
from typing import Optional


class TradosError(Exception):
    """Base class for all application errors."""


class ConfigurationError(TradosError):
    """Missing credential, input or rule set; raised before any dispatch."""


class ProviderCallError(TradosError):
    """A single provider call failed. Retried per chunk by the dispatcher."""


class ProviderError(ProviderCallError):
    """Provider answered with a non-success status or could not be reached."""

    def __init__(self, status: Optional[int], body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {body}" if status else body)


class RateLimited(ProviderCallError):
    """Provider answered HTTP 429."""

    def __init__(self, body: str = ""):
        self.status = 429
        self.body = body
        super().__init__(f"Rate limited: {body}" if body else "Rate limited")


class EmptyResponse(ProviderCallError):
    """Provider answered but returned no text."""

    def __init__(self, message: str = "Empty translation response"):
        super().__init__(message)


class AlignmentMismatch(TradosError):
    """Source and translation have different sentence counts."""

    def __init__(self, source_count: int, target_count: int):
        self.source_count = source_count
        self.target_count = target_count
        super().__init__(
            f"Sentence count mismatch: {source_count} source vs {target_count} target"
        )


class ImportFormatError(TradosError):
    """An interchange file could not be parsed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
