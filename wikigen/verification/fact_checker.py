"""Fact verification of generated content against research sources."""

import json
import logging

from ..models.article import Source
from ..models.verification import VerificationResult
from ..providers.base import ProviderClient, ProviderError, Temperature, parse_json_response


logger = logging.getLogger(__name__)


class FactChecker:
    """
    Asks the provider to verify content against sources.

    Core facts weigh 70% and supporting details 30%; content passes when the
    weighted score exceeds 70%. The provider's boolean is trusted as is, and
    any failure counts as unverified.
    """

    SYSTEM_PROMPT = """You are a fact-checking assistant. Verify if the given content is supported by the provided sources.

Use this verification framework:
1. Core Facts (70% weight):
   - Key claims and statistics
   - Historical dates and events
   - Scientific/technical information

2. Supporting Details (30% weight):
   - Contextual information
   - Background details
   - General knowledge claims

Verification levels:
- Strong verification (100%): Direct source confirmation
- Moderate verification (70%): Supported by multiple sources indirectly
- Weak verification (30%): General alignment with source material
- No verification (0%): Cannot be confirmed from sources

Calculate overall verification score:
1. For each claim, assign verification level
2. Weight core facts vs supporting details
3. Return true if overall score > 70%

Return JSON response:
{
  "verified": boolean,
  "score": number (0-100),
  "analysis": {
    "core_facts_score": number,
    "supporting_details_score": number,
    "unverified_claims": string[]
  }
}"""

    def __init__(self, provider: ProviderClient):
        self.provider = provider

    async def verify(self, content: str, sources: list[Source]) -> VerificationResult:
        user_prompt = (
            f"Content: {content}\n"
            f"Sources: {json.dumps([source.model_dump() for source in sources])}"
        )

        try:
            response = await self.provider.generate(
                self.SYSTEM_PROMPT,
                user_prompt,
                Temperature.RESEARCH,
                json_mode=True,
            )
        except ProviderError as e:
            logger.error(f"Error verifying facts, treating as unverified: {e}")
            return VerificationResult(verified=False, analysis={"error": str(e)})

        data = parse_json_response(response.text)
        if not isinstance(data, dict):
            logger.error("Fact verification returned unparsable output, treating as unverified")
            return VerificationResult(verified=False, analysis={"error": "unparsable response"})

        analysis = data.get("analysis")
        result = VerificationResult(
            verified=data.get("verified") is True,
            score=data.get("score", 0),
            analysis=analysis if isinstance(analysis, dict) else {},
        )
        logger.info(f"Fact verification: verified={result.verified} score={result.score:.0f}")
        return result
