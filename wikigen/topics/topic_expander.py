"""
Topic Expander - turns a broad topic into specific, disambiguated subtopics.

Naming rules live in the prompt; the returned names are not re-validated.
"""

import logging

from ..providers.base import ProviderClient, ProviderError, Temperature, parse_json_response


logger = logging.getLogger(__name__)


class TopicExpander:
    """
    Expands a general topic into encyclopedia-ready subtopic titles.

    Returns at most the requested number of subtopics and an empty list on
    any transport or parse failure.
    """

    SYSTEM_PROMPT = """You are a topic research expert. Given a general topic, generate specific, diverse subtopics.
Follow these rules strictly:
1. For people (historical figures, leaders, etc), use ONLY their full names as titles
   - Correct: "Mahatma Gandhi", "Albert Einstein"
   - Incorrect: "Gandhi's Influence", "Einstein's Theory"

2. For events, use the official or commonly accepted name
   - Correct: "World War II", "French Revolution"
   - Incorrect: "Impact of World War II", "Causes of French Revolution"

3. For concepts/topics, use clear, concise noun phrases
   - Correct: "Quantum Mechanics", "Photosynthesis"
   - Incorrect: "Understanding Quantum Mechanics", "How Photosynthesis Works"

Return ONLY a JSON object with a "subtopics" array of strings, each representing a specific subtopic.
Example response:
{
  "subtopics": ["Mahatma Gandhi", "Nelson Mandela", "Martin Luther King Jr."]
}"""

    def __init__(self, provider: ProviderClient):
        self.provider = provider

    async def expand(self, topic: str, desired_count: int) -> list[str]:
        """
        Expand a topic into subtopics.

        Args:
            topic: The broad topic
            desired_count: Upper bound on the number of subtopics returned

        Returns:
            Up to desired_count unique subtopic strings, never padded
        """
        if desired_count <= 0:
            return []

        logger.info(f"Expanding topic: {topic} into {desired_count} subtopics")

        try:
            response = await self.provider.generate(
                self.SYSTEM_PROMPT,
                f"Generate {desired_count} diverse subtopics for: {topic}",
                Temperature.IDEATION,
                json_mode=True,
            )
        except ProviderError as e:
            logger.error(f"Error expanding topics: {e}")
            return []

        data = parse_json_response(response.text)
        if isinstance(data, dict):
            data = data.get("subtopics")
        if not isinstance(data, list):
            logger.error("Error expanding topics: response has no subtopics array")
            return []

        subtopics = []
        for item in data:
            if isinstance(item, str) and item.strip() and item.strip() not in subtopics:
                subtopics.append(item.strip())

        subtopics = subtopics[:desired_count]
        logger.info(f"Parsed subtopics: {subtopics}")
        return subtopics
