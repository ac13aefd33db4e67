"""Source discovery for fact-checkable articles."""

import logging

from pydantic import ValidationError

from ..models.article import Source
from ..providers.base import ProviderClient, ProviderError, Temperature, parse_json_response


logger = logging.getLogger(__name__)


class SourceFinder:
    """Asks the provider for reliable, non-biased sources on a topic."""

    SYSTEM_PROMPT = """You are a research assistant. Search for reliable, non-biased sources from:
1. Academic journals and publications
2. Government research institutions
3. Scientific databases (e.g. PubMed, ScienceDirect)
4. Educational institutions (.edu domains)
5. Professional organizations and industry associations
6. Peer-reviewed publications
7. Research institutes and think tanks
8. Official statistics bureaus
9. Industry standard bodies
10. Technical documentation and specifications

Return ONLY a JSON object in this format:
{
  "sources": [{
    "url": "source url",
    "title": "source title",
    "publisher": "publishing organization",
    "type": "type of source (academic/government/research/etc)",
    "year": "publication year"
  }]
}

Ensure all sources are:
- Recent (preferably within last 5 years unless historical)
- Factually accurate
- Non-biased and objective
- From reputable organizations
- Primary sources where possible
- Peer-reviewed when applicable

Do not include:
- Wikipedia articles
- Personal blogs
- Social media posts
- Opinion pieces
- Unreliable news sites
- Commercial product pages"""

    def __init__(self, provider: ProviderClient):
        self.provider = provider

    async def find_sources(self, topic: str) -> list[Source]:
        """Return sources for the topic, or an empty list on any failure."""
        try:
            response = await self.provider.generate(
                self.SYSTEM_PROMPT,
                f"Find reliable sources for an article about: {topic}",
                Temperature.RESEARCH,
                json_mode=True,
            )
        except ProviderError as e:
            logger.error(f"Error searching sources: {e}")
            return []

        data = parse_json_response(response.text)
        raw_sources = data.get("sources") if isinstance(data, dict) else None
        if not isinstance(raw_sources, list):
            logger.error("Error parsing sources JSON: no 'sources' array")
            return []

        sources = []
        for item in raw_sources:
            if not isinstance(item, dict):
                continue
            if item.get("year") is not None:
                item = {**item, "year": str(item["year"])}
            try:
                sources.append(Source.model_validate(item))
            except ValidationError as e:
                logger.debug(f"Skipping malformed source: {e}")

        logger.info(f"Found {len(sources)} sources for '{topic}'")
        return sources
