"""
Content generation strategies.

The completion variant writes a single JSON object from researched sources;
the retrieval variant writes markdown with inline citations that the
response formatter normalizes.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from ..formatting.infobox import parse_key_facts
from ..formatting.response_formatter import format_response
from ..models.article import Citation, InfoBox, Source
from ..providers.base import ProviderClient, ProviderError, Temperature, parse_json_response


logger = logging.getLogger(__name__)


class ArticleDraft(BaseModel):
    """Generated article text before verification and assembly."""

    title: str
    content: str
    infobox: Optional[InfoBox] = None
    citations: list[Citation] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)

    @property
    def citation_sources(self) -> list[Source]:
        return [Source.from_citation(citation) for citation in self.citations]


class ArticleWriter(ABC):
    """Writes one article draft. Returns None when nothing usable comes back."""

    def __init__(self, provider: ProviderClient):
        self.provider = provider

    @abstractmethod
    async def write(
        self,
        topic: str,
        sources: list[Source],
        min_word_count: int,
        max_word_count: int,
    ) -> Optional[ArticleDraft]:
        ...


class JsonArticleWriter(ArticleWriter):
    """Completion-variant writer producing {title, content, references, infobox} as JSON."""

    SYSTEM_PROMPT = """You are an expert encyclopedia article writer with fact-checking capabilities.
Create a comprehensive, well-structured article about the given topic.

CRITICAL: You MUST respond with ONLY valid JSON in this exact format:
{{
  "title": "string (the article title)",
  "content": "string (the article content following the format below)",
  "references": ["array of reference strings"],
  "infobox": {{
    "title": "string",
    "image": 0,
    "key_facts": {{
      "key1": "value1",
      "key2": "value2"
    }}
  }}
}}

Content Format Requirements:
1. Start with a concise introduction (no heading)
2. Use markdown for formatting:
   - Use ## for main section headings
   - Use ### for subsection headings
   - Use regular text for content
   - Use [1], [2], etc. for citations
   - NO bold text or excessive formatting
3. Structure:
   - Introduction (no heading)
   - Main sections with ## heading
   - Subsections with ### heading if needed
   - References section at the end
4. Word count: {min_word_count}-{max_word_count} words
5. Style:
   - Academic and neutral tone
   - Clear and concise language
   - Proper citation format [1], [2], etc.
   - No excessive formatting or special characters

DO NOT include any text outside the JSON structure.
DO NOT use bold text or excessive formatting.
ENSURE the response is valid JSON that can be parsed."""

    async def write(
        self,
        topic: str,
        sources: list[Source],
        min_word_count: int,
        max_word_count: int,
    ) -> Optional[ArticleDraft]:
        system_prompt = self.SYSTEM_PROMPT.format(
            min_word_count=min_word_count,
            max_word_count=max_word_count,
        )
        user_prompt = (
            f"Write an article about: {topic}\n"
            f"Sources: {json.dumps([source.model_dump() for source in sources])}"
        )

        try:
            response = await self.provider.generate(
                system_prompt, user_prompt, Temperature.PROSE, json_mode=True
            )
        except ProviderError as e:
            logger.error(f"Error generating article content: {e}")
            return None

        data = parse_json_response(response.text)
        if not isinstance(data, dict):
            logger.error("Error parsing AI response: article is not a JSON object")
            return None

        content = data.get("content")
        if not isinstance(content, str) or not content.strip():
            logger.error("Article response contained no content")
            return None

        infobox = None
        if isinstance(data.get("infobox"), dict):
            try:
                infobox = InfoBox.model_validate(data["infobox"])
            except ValidationError as e:
                logger.warning(f"Discarding malformed infobox: {e}")

        references = data.get("references")
        title = data.get("title")
        return ArticleDraft(
            title=title.strip() if isinstance(title, str) and title.strip() else topic,
            content=content,
            infobox=infobox,
            references=[r for r in references if isinstance(r, str)] if isinstance(references, list) else [],
        )


class RetrievalArticleWriter(ArticleWriter):
    """
    Retrieval-variant writer.

    Extracts infobox key facts first, then writes the article with inline
    citations and normalizes it through the response formatter.
    """

    KEY_FACTS_PROMPT = """You are a factual information extractor. Extract and provide only the most essential facts about the topic.

Required format:
Type: [The main category or classification]
Origin: [When/where it originated]
Process: [Main method or technique]
Key Fact 1: [Important fact about the topic]
Key Fact 2: [Another important fact]
Key Fact 3: [Another important fact]

Rules:
1. Always include Type, Origin, and Process if applicable
2. Add 2-3 additional key facts specific to the topic
3. Keep values concise but informative
4. Use simple labels without special characters
5. Every value must be a real fact, not a placeholder
6. Do not use markdown or formatting

Example for "Coffee":
Type: Beverage
Origin: Ethiopia, 9th century
Process: Bean roasting and brewing
Caffeine Content: 80-100mg per cup
Plant Family: Rubiaceae
Global Production: Over 9 million tons annually"""

    ARTICLE_PROMPT = """You are an expert encyclopedia article writer, following Wikipedia's style and conventions.
Create a comprehensive, well-structured encyclopedia article about the given topic.

Title Requirements:
1. Put the title on the first line as a markdown heading (# Title)
2. Use Wikipedia-style titles:
   - Should be a noun or noun phrase
   - Capitalize only the first letter and proper nouns
   - Be concise and descriptive
   - Avoid "A", "The", or "An" at the start
   - No punctuation (except parentheses for disambiguation)
   - Examples:
     - "Coffee" (not "The History of Coffee")
     - "World War II" (not "The Second World War")
     - "Quantum mechanics" (not "Understanding Quantum Mechanics")
     - "Tiger (animal)" (when disambiguation is needed)

Content Format Requirements:
1. Start with a concise introduction (2-3 paragraphs, no heading)
2. Use proper paragraphs for all main content; each paragraph 3-5 sentences
3. Use ## for main section headings and ### for subsection headings
4. Only use bullet points for lists of specific items or steps
5. Academic and neutral tone, clear and concise language
6. Citations:
   - Use inline citations [1], [2], etc. after relevant statements
   - Multiple citations can be used together [1][2]
   - DO NOT create a References section (it will be added automatically)
7. Word count: {min_word_count}-{max_word_count} words

Remember: This is an encyclopedia article, not a list or outline."""

    async def extract_key_facts(self, topic: str) -> dict[str, str]:
        try:
            response = await self.provider.generate(
                self.KEY_FACTS_PROMPT,
                f"Extract key facts about: {topic}",
                Temperature.FACT_EXTRACTION,
            )
        except ProviderError as e:
            logger.warning(f"Key fact extraction failed, infobox will be empty: {e}")
            return {}

        facts = parse_key_facts(response.text)
        logger.debug(f"Parsed key facts: {facts}")
        return facts

    async def write(
        self,
        topic: str,
        sources: list[Source],
        min_word_count: int,
        max_word_count: int,
    ) -> Optional[ArticleDraft]:
        key_facts = await self.extract_key_facts(topic)

        try:
            response = await self.provider.generate(
                self.ARTICLE_PROMPT.format(
                    min_word_count=min_word_count,
                    max_word_count=max_word_count,
                ),
                f"Write an encyclopedia article about: {topic}. "
                f"Remember to use a Wikipedia-style title format and proper paragraph structure.",
                Temperature.RETRIEVAL_DEFAULT,
            )
        except ProviderError as e:
            logger.error(f"Error generating article content: {e}")
            return None

        formatted = format_response(response.text, response.citations)
        if formatted is None or not formatted.content:
            logger.error(f"Failed to format response for '{topic}'")
            return None

        return ArticleDraft(
            title=formatted.title,
            content=formatted.content,
            infobox=InfoBox(title=formatted.title, image=0, key_facts=key_facts),
            citations=response.citations,
            references=formatted.references,
        )
