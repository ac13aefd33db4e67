"""Content moderation gate."""

import logging

from ..models.verification import ModerationDecision, ModerationResult
from ..providers.base import (
    ModerationClassifier,
    ProviderClient,
    ProviderError,
    Temperature,
    parse_json_response,
)


logger = logging.getLogger(__name__)

MODERATION_ERROR_REASON = "Error during moderation check"


class ContentModerator:
    """
    Runs content through a moderation classifier.

    Content is inappropriate when any category is flagged. A failed check is
    also treated as inappropriate so unchecked content never passes.
    """

    def __init__(self, classifier: ModerationClassifier):
        self.classifier = classifier

    async def moderate(self, content: str) -> ModerationDecision:
        try:
            result = await self.classifier.classify(content)
        except (ProviderError, ValueError) as e:
            logger.error(f"Error moderating content: {e}")
            return ModerationDecision(is_appropriate=False, reason=MODERATION_ERROR_REASON)

        flagged = result.flagged_categories
        if result.flagged or flagged:
            return ModerationDecision(
                is_appropriate=False,
                reason=", ".join(flagged) or "flagged",
            )
        return ModerationDecision(is_appropriate=True)


class PromptModerationClassifier(ModerationClassifier):
    """
    Moderation classifier that asks a language model for a JSON verdict.
    Used when no dedicated moderation endpoint is configured.
    """

    CATEGORIES = (
        "harassment",
        "hate",
        "self-harm",
        "sexual",
        "sexual/minors",
        "violence",
        "violence/graphic",
        "illicit",
    )

    SYSTEM_PROMPT = """You are a content moderation classifier for an encyclopedia.
Decide for each category whether the text contains content of that kind that is
inappropriate for publication. Neutral, factual, encyclopedic discussion of a
sensitive subject is NOT a violation.

Categories: {categories}

Return ONLY a JSON object in this format:
{{
  "flagged": boolean,
  "categories": {{"category name": boolean}}
}}"""

    def __init__(self, provider: ProviderClient):
        self.provider = provider

    async def classify(self, text: str) -> ModerationResult:
        response = await self.provider.generate(
            self.SYSTEM_PROMPT.format(categories=", ".join(self.CATEGORIES)),
            text,
            Temperature.RESEARCH,
            json_mode=True,
        )

        data = parse_json_response(response.text)
        if not isinstance(data, dict) or not isinstance(data.get("flagged"), bool):
            raise ValueError("moderation response is missing a boolean 'flagged'")

        categories = data.get("categories")
        if not isinstance(categories, dict):
            categories = {}

        return ModerationResult(
            flagged=data["flagged"],
            categories={str(name): hit is True for name, hit in categories.items()},
        )
