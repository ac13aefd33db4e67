"""
Categorization of finished articles.

Categories and tags are enrichment: any failure degrades to empty lists
instead of stopping generation.
"""

import logging
import re
from abc import ABC, abstractmethod

from ..models.verification import Categorization
from ..providers.base import ProviderClient, ProviderError, Temperature, parse_json_response


logger = logging.getLogger(__name__)

MAX_CATEGORIES = 10
MAX_TAGS = 10
CATEGORY_BUCKETS = ("main", "intermediate", "specific", "administrative")


def _clean_names(values, limit: int) -> list[str]:
    names = []
    for value in values:
        if isinstance(value, str) and value.strip() and value.strip() not in names:
            names.append(value.strip())
    return names[:limit]


class Categorizer(ABC):
    def __init__(self, provider: ProviderClient):
        self.provider = provider

    @abstractmethod
    async def categorize(self, content: str) -> Categorization:
        """Return categories and tags for the content; empty on failure."""


class HierarchicalCategorizer(Categorizer):
    """
    JSON categorization with broad-to-specific buckets.

    Buckets are flattened in main, intermediate, specific, administrative
    order and capped at 10 categories.
    """

    SYSTEM_PROMPT = """You are an encyclopedia categorization expert. Analyze the article and generate appropriate categories and tags following encyclopedia guidelines:

1. Generate between 2-10 categories total (aim for 3-7 as ideal)
2. Use hierarchical categorization, including:
   - One broad/main category
   - 1-2 intermediate categories
   - 1-3 specific categories
   - 1-2 administrative categories (if needed, e.g., "Articles needing citations")

3. Follow Encyclopedia naming conventions:
   - Use plural forms for most categories
   - Capitalize first letter of each word
   - Use natural language order
   - Avoid redundant categorization

4. Ensure categories are:
   - Objective and factual
   - Neither too broad nor too specific
   - Directly relevant to the main topic
   - Following established category trees

5. Add 3-8 short lowercase tags naming the key subjects of the article.

Return ONLY a JSON object in this format:
{
  "tags": ["tag1", "tag2"],
  "categories": {
    "main": ["Primary category"],
    "intermediate": ["Secondary category 1", "Secondary category 2"],
    "specific": ["Specific category 1", "Specific category 2"],
    "administrative": ["Administrative category"]
  }
}"""

    async def categorize(self, content: str) -> Categorization:
        try:
            response = await self.provider.generate(
                self.SYSTEM_PROMPT,
                content,
                Temperature.CATEGORIZATION,
                json_mode=True,
            )
        except ProviderError as e:
            logger.error(f"Error generating categories: {e}")
            return Categorization()

        data = parse_json_response(response.text)
        if not isinstance(data, dict):
            logger.error("Error generating categories: unparsable response")
            return Categorization()

        raw_categories = data.get("categories") or {}
        if isinstance(raw_categories, dict):
            flattened = []
            for bucket in CATEGORY_BUCKETS:
                values = raw_categories.get(bucket) or []
                if isinstance(values, list):
                    flattened.extend(values)
        elif isinstance(raw_categories, list):
            flattened = raw_categories
        else:
            flattened = []

        raw_tags = data.get("tags")
        return Categorization(
            categories=_clean_names(flattened, MAX_CATEGORIES),
            tags=_clean_names(raw_tags if isinstance(raw_tags, list) else [], MAX_TAGS),
        )


class LineListCategorizer(Categorizer):
    """Categorization from hyphen-prefixed lines, for free-text providers."""

    SYSTEM_PROMPT = """You are a content categorization expert. Analyze the content and suggest relevant categories and tags.
Write a line "Categories:" followed by the categories, one per line, each starting with a hyphen (-).
Then write a line "Tags:" followed by short lowercase tags, one per line, each starting with a hyphen (-).
Categories should be:
1. Specific but not too narrow
2. Hierarchical where appropriate
3. Consistent with academic/professional standards"""

    HEADER_PATTERN = re.compile(r"^\W*(categories|tags)\W*:?\W*$", re.IGNORECASE)

    async def categorize(self, content: str) -> Categorization:
        try:
            response = await self.provider.generate(
                self.SYSTEM_PROMPT,
                content,
                Temperature.RETRIEVAL_DEFAULT,
            )
        except ProviderError as e:
            logger.error(f"Error generating categories: {e}")
            return Categorization()

        return self._parse(response.text)

    def _parse(self, text: str) -> Categorization:
        buckets = {"categories": [], "tags": []}
        current = "categories"

        for line in (text or "").split("\n"):
            stripped = line.strip()
            header = self.HEADER_PATTERN.match(stripped)
            if header:
                current = header.group(1).lower()
                continue
            if stripped.startswith("-"):
                buckets[current].append(re.sub(r"^-\s*", "", stripped).strip())

        return Categorization(
            categories=_clean_names(buckets["categories"], MAX_CATEGORIES),
            tags=_clean_names(buckets["tags"], MAX_TAGS),
        )
