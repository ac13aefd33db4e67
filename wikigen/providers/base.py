"""
Provider client contract shared by the completion and retrieval variants.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..models.article import Citation
from ..models.verification import ModerationResult


logger = logging.getLogger(__name__)


class Temperature:
    """Sampling temperature per call purpose. Structured output uses the low end."""
    FACT_EXTRACTION = 0.1
    RETRIEVAL_DEFAULT = 0.2
    RESEARCH = 0.3
    CATEGORIZATION = 0.5
    PROSE = 0.7
    IDEATION = 0.8


class ProviderError(Exception):
    """Raised when a provider call fails in transport or returns a non-success status."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider}: {message}")


class ProviderResponse(BaseModel):
    text: str = ""
    citations: list[Citation] = Field(default_factory=list)


class ProviderClient(ABC):
    """
    Turns a system prompt and user prompt into generated text.

    Implementations raise ProviderError on network failure or a non-success
    status; callers inside the pipeline catch it and pick a soft-fail value.
    """

    name: str = "provider"

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_mode: bool = False,
    ) -> ProviderResponse:
        """Run one generation call."""

    async def aclose(self) -> None:
        """Release any underlying connections."""


class ModerationClassifier(ABC):
    """Classifies text against moderation categories."""

    @abstractmethod
    async def classify(self, text: str) -> ModerationResult:
        """Return the overall flag and per-category flags. Raises ProviderError on failure."""

    async def aclose(self) -> None:
        """Release any underlying connections."""


def parse_json_response(response_text: Optional[str]) -> Optional[Any]:
    """
    Parse a model response as JSON.

    Strips markdown code fences and, failing a direct parse, falls back to the
    outermost JSON object in the text. Returns None if nothing parses.
    """
    if not response_text:
        return None

    text = response_text.strip()

    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    text = text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse error in provider response: {e}")
        json_match = re.search(r'\{[\s\S]*\}', text)
        if json_match:
            try:
                return json.loads(json_match.group())
            except json.JSONDecodeError:
                logger.warning("Secondary JSON parse also failed")
        return None
