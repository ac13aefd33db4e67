"""OpenAI completion provider and moderation classifier."""

import os
from typing import Optional
import logging

from openai import AsyncOpenAI, OpenAIError

from .base import ModerationClassifier, ProviderClient, ProviderError, ProviderResponse
from ..models.verification import ModerationResult


logger = logging.getLogger(__name__)


class OpenAICompletionClient(ProviderClient):
    """
    Completion-style provider backed by the OpenAI chat completions API.

    With ``json_mode`` the model is asked for a single JSON object
    (``response_format={"type": "json_object"}``); the system prompt carries
    the exact schema.
    """

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ValueError("OPENAI_API_KEY not set")
            kwargs = {"api_key": self.api_key}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_mode: bool = False,
    ) -> ProviderResponse:
        request = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**request)
        except ValueError as e:
            raise ProviderError(self.name, str(e)) from e
        except OpenAIError as e:
            raise ProviderError(self.name, str(e), getattr(e, "status_code", None)) from e

        if not response.choices:
            raise ProviderError(self.name, "response contained no choices")

        return ProviderResponse(text=response.choices[0].message.content or "")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()


class OpenAIModerationClassifier(ModerationClassifier):
    """Moderation classifier backed by the OpenAI moderations endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "omni-moderation-latest",
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ValueError("OPENAI_API_KEY not set")
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def classify(self, text: str) -> ModerationResult:
        try:
            response = await self.client.moderations.create(model=self.model, input=text)
        except ValueError as e:
            raise ProviderError("openai-moderation", str(e)) from e
        except OpenAIError as e:
            raise ProviderError("openai-moderation", str(e), getattr(e, "status_code", None)) from e

        if not response.results:
            raise ProviderError("openai-moderation", "response contained no results")

        result = response.results[0]
        categories = result.categories
        if hasattr(categories, "model_dump"):
            categories = categories.model_dump(by_alias=True)

        return ModerationResult(
            flagged=bool(result.flagged),
            categories={name: bool(hit) for name, hit in dict(categories).items()},
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
