"""Duplicate detection against existing articles."""

import json
import logging
from abc import ABC, abstractmethod

from pydantic import ValidationError

from ..models.article import Article
from ..models.verification import DuplicateCheckResult, SimilarArticle
from ..providers.base import ProviderClient, ProviderError, Temperature, parse_json_response


logger = logging.getLogger(__name__)


class DuplicateDetector(ABC):
    """
    Decides whether a candidate article duplicates an existing one.

    Called twice per generation attempt: once with an empty body before any
    content exists, and once with the full content.
    """

    @abstractmethod
    async def check(
        self,
        title: str,
        content: str,
        existing_articles: list[Article],
    ) -> DuplicateCheckResult:
        """Return the duplicate decision. Never raises for provider failures."""


class SimilarityDuplicateDetector(DuplicateDetector):
    """
    Model-scored similarity check.

    Title similarity carries 40% of the weight and content similarity 60%.
    A failed call is treated as "not a duplicate".
    """

    SYSTEM_PROMPT = """You are a duplicate content detection expert. Analyze the proposed article against existing articles to prevent duplicates.

Check for:
1. Title similarity (40% weight):
   - Exact matches
   - Similar meanings/synonyms
   - Subset/superset relationships

2. Content similarity (60% weight):
   - Main topic overlap
   - Key concepts coverage
   - Structural similarity
   - Fact/information overlap

Return JSON response:
{
  "isDuplicate": boolean,
  "similarity_score": number (0-100),
  "similar_articles": [{
    "id": string,
    "title": string,
    "similarity": number (0-100)
  }],
  "reason": string (if duplicate),
  "recommendation": string (if duplicate)
}"""

    def __init__(self, provider: ProviderClient):
        self.provider = provider

    def _build_user_prompt(self, title: str, content: str, existing_articles: list[Article]) -> str:
        existing = [
            {"id": article.id, "title": article.title, "content": article.content}
            for article in existing_articles
        ]
        return (
            f"Proposed article:\n"
            f"Title: {title}\n"
            f"Content: {content}\n\n"
            f"Existing articles:\n{json.dumps(existing)}"
        )

    async def check(
        self,
        title: str,
        content: str,
        existing_articles: list[Article],
    ) -> DuplicateCheckResult:
        try:
            response = await self.provider.generate(
                self.SYSTEM_PROMPT,
                self._build_user_prompt(title, content, existing_articles),
                Temperature.RESEARCH,
                json_mode=True,
            )
            data = parse_json_response(response.text)
            if not isinstance(data, dict):
                raise ValueError("duplicate check response is not a JSON object")
        except (ProviderError, ValueError, TypeError) as e:
            logger.error(f"Error checking for duplicates, assuming not duplicate: {e}")
            return DuplicateCheckResult(is_duplicate=False)

        reason = data.get("reason")
        return DuplicateCheckResult(
            is_duplicate=data.get("isDuplicate") is True,
            similar_articles=self._parse_similar(data.get("similar_articles")),
            reason=str(reason) if reason else None,
        )

    def _parse_similar(self, items) -> list[SimilarArticle]:
        """Diagnostic only: malformed entries are skipped, never fatal."""
        if not isinstance(items, list):
            return []

        similar = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                similar.append(SimilarArticle.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed similar article entry: {e}")
        return similar


class TitleMatchDuplicateDetector(DuplicateDetector):
    """Exact, case-insensitive title match. Content is not consulted."""

    async def check(
        self,
        title: str,
        content: str,
        existing_articles: list[Article],
    ) -> DuplicateCheckResult:
        normalized = title.strip().lower()
        matches = [
            SimilarArticle(id=article.id, title=article.title, similarity=100.0)
            for article in existing_articles
            if article.title.strip().lower() == normalized
        ]
        if matches:
            return DuplicateCheckResult(
                is_duplicate=True,
                similar_articles=matches,
                reason=f"An article titled '{matches[0].title}' already exists",
            )
        return DuplicateCheckResult(is_duplicate=False)
