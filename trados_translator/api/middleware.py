"""
API Middleware
==============
Rate limiting and API-key authentication for the /api routes.
"""
import hashlib
import hmac
import threading
import time
from collections import defaultdict, deque
from functools import wraps
from typing import Callable, Dict, Optional, Tuple
from flask import request, jsonify, g

from trados_translator.config import config
from trados_translator.utils.logging import get_channel

WINDOW_SECONDS = 60


class RateLimiter:
    """
    In-memory sliding-window rate limiter.

    Clients are keyed by remote address plus API key; the translate endpoint
    fans out into several provider calls, so a per-minute cap protects the
    provider quota as well as the server.
    """

    def __init__(self, requests_per_minute: int = 60):
        self.requests_per_minute = requests_per_minute
        self.requests: Dict[str, deque] = defaultdict(deque)
        self.lock = threading.Lock()
        self.logger = get_channel('api')

    def _get_client_id(self) -> str:
        forwarded = request.headers.get('X-Forwarded-For')
        if forwarded:
            ip = forwarded.split(',')[0].strip()
        else:
            ip = request.remote_addr or 'unknown'
        api_key = request.headers.get('X-API-Key', '')
        return hashlib.sha256(f"{ip}:{api_key}".encode()).hexdigest()[:16]

    def is_allowed(self, client_id: str = None, now: float = None) -> Tuple[bool, dict]:
        """
        Record a request and decide whether it may proceed.

        Returns:
            Tuple of (allowed, header info)
        """
        client_id = client_id or self._get_client_id()
        now = time.time() if now is None else now
        window_start = now - WINDOW_SECONDS

        with self.lock:
            timestamps = self.requests[client_id]
            while timestamps and timestamps[0] <= window_start:
                timestamps.popleft()

            if len(timestamps) >= self.requests_per_minute:
                retry_after = int(timestamps[0] - window_start) + 1
                self.logger.warning(f"Rate limit exceeded for client {client_id}")
                return False, {
                    'limit': self.requests_per_minute,
                    'remaining': 0,
                    'reset': retry_after
                }

            timestamps.append(now)
            return True, {
                'limit': self.requests_per_minute,
                'remaining': self.requests_per_minute - len(timestamps),
                'reset': WINDOW_SECONDS
            }


class APIKeyAuth:
    """Optional shared-secret check; disabled when no API_KEY is configured."""

    def __init__(self, api_key: str = None):
        self.api_key = config.security.api_key if api_key is None else api_key

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def validate(self, api_key: Optional[str]) -> bool:
        if not self.enabled:
            return True
        if not api_key:
            return False
        return hmac.compare_digest(api_key.encode(), self.api_key.encode())


# Global instances
_rate_limiter: Optional[RateLimiter] = None
_api_key_auth: Optional[APIKeyAuth] = None


def get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter(config.security.rate_limit_per_minute)
    return _rate_limiter


def get_api_key_auth() -> APIKeyAuth:
    global _api_key_auth
    if _api_key_auth is None:
        _api_key_auth = APIKeyAuth()
    return _api_key_auth


def reset_middleware() -> None:
    """Drop limiter history and reload the API key (for testing)."""
    global _rate_limiter, _api_key_auth
    _rate_limiter = None
    _api_key_auth = None


def rate_limit(f: Callable) -> Callable:
    """Rate limiting decorator."""
    @wraps(f)
    def decorated(*args, **kwargs):
        allowed, info = get_rate_limiter().is_allowed()
        g.rate_limit_info = info

        if not allowed:
            return jsonify({
                'error': 'Rate limit exceeded',
                'retry_after': info['reset']
            }), 429

        return f(*args, **kwargs)

    return decorated


def require_api_key(f: Callable) -> Callable:
    """API key authentication decorator (X-API-Key header)."""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth = get_api_key_auth()
        if not auth.enabled:
            return f(*args, **kwargs)

        api_key = request.headers.get('X-API-Key')
        if not api_key:
            return jsonify({'error': 'API key required'}), 401
        if not auth.validate(api_key):
            get_channel('api').warning("Rejected request with invalid API key")
            return jsonify({'error': 'Invalid API key'}), 403

        return f(*args, **kwargs)

    return decorated


def add_rate_limit_headers(response):
    """Add rate limit headers to response."""
    info = getattr(g, 'rate_limit_info', None)
    if info:
        response.headers['X-RateLimit-Limit'] = str(info['limit'])
        response.headers['X-RateLimit-Remaining'] = str(info['remaining'])
        response.headers['X-RateLimit-Reset'] = str(info['reset'])
    return response
