"""
Gemini API Client
=================
Client for the Gemini generateContent endpoint.
"""
import asyncio
import json
from typing import Optional

import requests

from trados_translator.config import config
from trados_translator.errors import ConfigurationError, ProviderError, RateLimited, EmptyResponse
from trados_translator.utils.logging import get_channel, debug_print


class GeminiClient:
    """
    Client for Gemini API interactions.

    Every failure is raised as a typed ``ProviderCallError`` so the dispatcher
    can decide how long to back off.
    """

    def __init__(
        self,
        api_key: str = None,
        model: str = None,
        base_url: str = None,
        session: requests.Session = None
    ):
        self.api_key = api_key or config.gemini.api_key
        if not self.api_key:
            raise ConfigurationError("Gemini API key is required")

        self.model = model or config.gemini.model
        self.base_url = base_url or config.gemini.base_url
        self.logger = get_channel('provider')

        # Set up session with connection pooling; retries belong to the dispatcher
        self.session = session or requests.Session()
        if session is None:
            adapter = requests.adapters.HTTPAdapter(pool_connections=10, pool_maxsize=10)
            self.session.mount('http://', adapter)
            self.session.mount('https://', adapter)

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _payload(self, prompt: str) -> dict:
        return {
            'contents': [{'parts': [{'text': prompt}]}],
            'generationConfig': {
                'temperature': config.gemini.temperature,
                'maxOutputTokens': config.gemini.max_output_tokens
            }
        }

    def generate(self, prompt: str) -> str:
        """
        Send one prompt and return the generated text.

        Raises:
            RateLimited: HTTP 429
            ProviderError: any other non-2xx status or a network failure
            EmptyResponse: the response carried no text
        """
        try:
            response = self.session.post(
                self.api_url,
                params={'key': self.api_key},
                json=self._payload(prompt),
                timeout=(config.gemini.connect_timeout, config.gemini.read_timeout)
            )
        except requests.Timeout:
            raise ProviderError(None, "Request timed out")
        except requests.RequestException as e:
            raise ProviderError(None, str(e))

        if response.status_code == 429:
            raise RateLimited(response.text)
        if not 200 <= response.status_code < 300:
            raise ProviderError(response.status_code, response.text)

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise ProviderError(response.status_code, f"Invalid JSON response: {e}")

        text = self._extract_text(data)
        if not text or not text.strip():
            raise EmptyResponse()

        debug_print(f"Received {len(text)} chars", 'provider', 'DEBUG')
        return text

    @staticmethod
    def _extract_text(data: dict) -> Optional[str]:
        try:
            parts = data['candidates'][0]['content']['parts']
        except (KeyError, IndexError, TypeError):
            return None
        return ''.join(part.get('text', '') for part in parts if isinstance(part, dict))

    async def generate_async(self, prompt: str) -> str:
        """Run ``generate`` in a worker thread."""
        return await asyncio.to_thread(self.generate, prompt)

    def close(self):
        """Close the session."""
        self.session.close()
