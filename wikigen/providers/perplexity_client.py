"""Perplexity retrieval provider with inline citations."""

import os
from typing import Optional
import httpx
import logging

from .base import ProviderClient, ProviderError, ProviderResponse
from ..models.article import Citation


logger = logging.getLogger(__name__)

PERPLEXITY_API_BASE = "https://api.perplexity.ai"


class PerplexityRetrievalClient(ProviderClient):
    """
    Retrieval-augmented provider for the Perplexity chat completions API.

    Sampling parameters are fixed: top_p 0.9, frequency_penalty 1, a one-month
    recency filter, no images, no related questions, no streaming. The
    response's citation URLs come back numbered from 1.
    """

    name = "perplexity"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "llama-3.1-sonar-large-128k-online",
        base_url: str = PERPLEXITY_API_BASE,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or os.getenv("PERPLEXITY_API_KEY")
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy load the HTTP client."""
        if self._client is None:
            if not self.api_key:
                raise ValueError("PERPLEXITY_API_KEY not set")
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _build_payload(self, system_prompt: str, user_prompt: str, temperature: float) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "top_p": 0.9,
            "frequency_penalty": 1,
            "presence_penalty": 0,
            "search_recency_filter": "month",
            "return_images": False,
            "return_related_questions": False,
            "stream": False,
        }

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_mode: bool = False,
    ) -> ProviderResponse:
        # JSON output is requested through the prompt; the endpoint takes no response_format here.
        payload = self._build_payload(system_prompt, user_prompt, temperature)

        try:
            response = await self.client.post("/chat/completions", json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"HTTP error: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, str(e)) from e

        if response.status_code >= 400:
            raise ProviderError(
                self.name,
                f"API error: {response.status_code} {response.reason_phrase}",
                response.status_code,
            )

        try:
            result = response.json()
            content = result["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, f"Malformed response body: {e}") from e

        citations = [
            Citation(id=index + 1, url=url, title=f"Reference {index + 1}")
            for index, url in enumerate(result.get("citations") or [])
            if isinstance(url, str)
        ]

        logger.debug(f"Perplexity returned {len(content)} chars with {len(citations)} citations")
        return ProviderResponse(text=content, citations=citations)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
