"""
Chat-completion client for the AI features.

One single-turn request per call against an OpenAI-compatible
/chat/completions endpoint:

    POST {api_base}/chat/completions
    Authorization: Bearer <key>
    {"model": ..., "messages": [{"role": "user", "content": prompt}], "max_tokens": ...}

The first choice's message content is returned. Used by the AI lyrics
cleaner and by the artist/song commentary service.
"""

import asyncio

import aiohttp

from lyricpane.core.config import Settings
from lyricpane.core.exceptions import UpstreamError
from lyricpane.core.logger import get_logger


ERROR_BODY_EXCERPT = 300


class CompletionClient:
    """
    Async client for the text-completion service

    Like GeniusClient, the aiohttp session is created lazily and only
    closed by close() when this client created it.

    Attributes:
        config: CompletionConfig section of the settings
        credentials: Credential chain for the API key
    """

    def __init__(self, settings: Settings, session: aiohttp.ClientSession | None = None):
        self.config = settings.completion
        self.credentials = settings.completion_credentials()
        self.logger = get_logger(__name__)

        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this client created it"""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def build_request(self, prompt: str, max_tokens: int | None = None) -> dict:
        """Request body for a single user message"""
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens or self.config.max_tokens,
        }

    async def complete(self, prompt: str, max_tokens: int | None = None) -> str:
        """
        Run one completion

        Args:
            prompt: Full user prompt
            max_tokens: Token budget, defaults to config.max_tokens (500)

        Returns:
            Content of the first choice

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamError: On non-2xx status (with a body excerpt), transport
                           failure, unparsable JSON or an empty choices list
        """
        api_key = self.credentials.require()
        url = f"{self.config.api_base.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        body = self.build_request(prompt, max_tokens)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        self.logger.debug(f"Completion request: model={body['model']}, max_tokens={body['max_tokens']}")
        session = await self._get_session()

        try:
            async with session.post(url, json=body, headers=headers, timeout=timeout) as response:
                if not 200 <= response.status < 300:
                    error_text = await response.text()
                    raise UpstreamError(
                        f"OpenAI API error {response.status}: {error_text[:ERROR_BODY_EXCERPT]}",
                        status=response.status,
                        service="completion"
                    )
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(
                f"OpenAI request failed: {str(e) or type(e).__name__}",
                service="completion"
            ) from e
        except ValueError as e:
            raise UpstreamError(
                f"Failed to parse OpenAI response: {e}",
                service="completion"
            ) from e

        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("No response from OpenAI", service="completion") from e

        if not isinstance(content, str):
            raise UpstreamError("No response from OpenAI", service="completion")

        return content
