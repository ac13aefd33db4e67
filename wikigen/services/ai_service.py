"""
AI services exposing article generation behind one interface.

Two variants share the interface: a completion service (OpenAI) and a
retrieval service (Perplexity). Pipelines underneath are provider-agnostic;
each service only chooses which components to plug in.
"""

import logging
import random
import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from ..auth.session import SessionProvider
from ..config.settings import Settings
from ..models.article import Article, ArticleCategory
from ..models.verification import BatchResult, EditSuggestions
from ..pipeline.article_pipeline import ArticlePipeline, new_id
from ..pipeline.batch_pipeline import BatchPipeline
from ..pipeline.writers import JsonArticleWriter, RetrievalArticleWriter
from ..providers.openai_client import OpenAICompletionClient, OpenAIModerationClassifier
from ..providers.openverse import OpenverseClient
from ..providers.perplexity_client import PerplexityRetrievalClient
from ..providers.base import (
    ModerationClassifier,
    ProviderClient,
    ProviderError,
    Temperature,
    parse_json_response,
)
from ..research.categorizer import Categorizer, HierarchicalCategorizer, LineListCategorizer
from ..research.images import ImageFinder, OpenverseImageFinder, SuggestedImageFinder
from ..research.sources import SourceFinder
from ..topics.topic_expander import TopicExpander
from ..verification.duplicates import SimilarityDuplicateDetector, TitleMatchDuplicateDetector
from ..verification.fact_checker import FactChecker
from ..verification.moderation import ContentModerator, PromptModerationClassifier


logger = logging.getLogger(__name__)


EXPAND_CONTENT_PROMPT = """You are an expert encyclopedia article writer. When expanding content, follow these strict rules:

CRITICAL HEADER RULES:
1. NEVER modify, remove, or change any existing headers (lines starting with ## or ###)
2. If the selected text starts with a header (## or ###), ALWAYS keep it as the first line
3. If expanding under a header, keep the header's context and theme
4. Only add new subheaders (###) if they logically fit under the main section (##)

WRITING STYLE:
1. Use formal, academic tone throughout
2. Write in well-structured paragraphs (3-5 sentences each)
3. NEVER use bullet points or lists
4. Maintain encyclopedic objectivity and neutrality

INTEGRATION RULES:
1. Match the writing style of the surrounding context
2. Create smooth transitions with existing content
3. Keep any existing citations and add new ones as [n]
4. Preserve any existing markdown formatting

Return the expanded content with all original headers intact."""

RELATED_TOPICS_PROMPT = """Generate a list of related topics that would make good encyclopedia articles.
Consider different aspects, subtopics, and connected subjects.
Return ONLY a JSON object in this format: {"topics": ["topic 1", "topic 2"]}"""


class AIService(ABC):
    """
    Article generation service.

    Subclasses wire a provider into the Single-Article and Batch pipelines.
    """

    def __init__(
        self,
        provider: ProviderClient,
        session: SessionProvider,
        article_pipeline: ArticlePipeline,
        categorizer: Categorizer,
        topic_expander: TopicExpander,
        rng: Optional[random.Random] = None,
    ):
        self.provider = provider
        self.session = session
        self.article_pipeline = article_pipeline
        self.categorizer = categorizer
        self.batch_pipeline = BatchPipeline(article_pipeline, topic_expander, rng=rng)

    async def generate_article(
        self,
        topic: str,
        existing_articles: Optional[list[Article]] = None,
        min_word_count: int = 500,
        max_word_count: int = 2000,
    ) -> Optional[Article]:
        return await self.article_pipeline.generate_article(
            topic, existing_articles, min_word_count, max_word_count
        )

    async def generate_articles(
        self,
        topic: str,
        count: int,
        existing_articles: Optional[list[Article]] = None,
        min_word_count: int = 500,
        max_word_count: int = 2000,
    ) -> list[Article]:
        return await self.batch_pipeline.generate_many(
            topic, count, existing_articles, min_word_count, max_word_count
        )

    async def generate_batch(
        self,
        topic: str,
        count: int,
        existing_articles: Optional[list[Article]] = None,
        min_word_count: int = 500,
        max_word_count: int = 2000,
    ) -> BatchResult:
        """Like generate_articles, but returns the full batch report."""
        return await self.batch_pipeline.run(
            topic, count, existing_articles, min_word_count, max_word_count
        )

    async def generate_categories(self, content: str) -> list[ArticleCategory]:
        categorization = await self.categorizer.categorize(content)
        return [
            ArticleCategory(id=self.article_pipeline.id_factory(), name=name)
            for name in categorization.categories
        ]

    @abstractmethod
    async def suggest_edits(self, content: str) -> EditSuggestions:
        ...

    async def expand_content(self, selected_content: str, context: str) -> str:
        """Expand a passage in place, keeping its headers. Returns the input on failure."""
        try:
            response = await self.provider.generate(
                EXPAND_CONTENT_PROMPT,
                f"Context: {context}\n\nExpand this content while preserving all headers:\n{selected_content}",
                Temperature.PROSE,
            )
        except ProviderError as e:
            logger.error(f"Error expanding content: {e}")
            return selected_content
        return response.text.strip() or selected_content

    async def generate_related_topics(self, title: str) -> list[str]:
        try:
            response = await self.provider.generate(
                RELATED_TOPICS_PROMPT, title, Temperature.IDEATION, json_mode=True
            )
        except ProviderError as e:
            logger.error(f"Error generating related topics: {e}")
            return []

        data = parse_json_response(response.text)
        if isinstance(data, dict):
            data = data.get("topics")
        if not isinstance(data, list):
            return []
        return [item.strip() for item in data if isinstance(item, str) and item.strip()]

    async def aclose(self) -> None:
        await self.provider.aclose()
        await self.article_pipeline.moderator.classifier.aclose()


class OpenAIService(AIService):
    """
    Completion variant.

    Researches sources before writing, writes a JSON article, and scores
    duplicates by model-judged title/content similarity.
    """

    def __init__(
        self,
        provider: ProviderClient,
        session: SessionProvider,
        moderation_classifier: ModerationClassifier,
        image_finder: Optional[ImageFinder] = None,
        rng: Optional[random.Random] = None,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = datetime.now,
    ):
        categorizer = HierarchicalCategorizer(provider)
        pipeline = ArticlePipeline(
            session=session,
            writer=JsonArticleWriter(provider),
            duplicate_detector=SimilarityDuplicateDetector(provider),
            fact_checker=FactChecker(provider),
            moderator=ContentModerator(moderation_classifier),
            categorizer=categorizer,
            image_finder=image_finder or SuggestedImageFinder(provider),
            source_finder=SourceFinder(provider),
            id_factory=id_factory,
            clock=clock,
        )
        super().__init__(provider, session, pipeline, categorizer, TopicExpander(provider), rng=rng)

    async def suggest_edits(self, content: str) -> EditSuggestions:
        system_prompt = """You are an expert editor. Analyze the given content and:
1. Suggest improvements for clarity, accuracy, and style
2. Identify potential biases or unsupported claims
3. Recommend additional sections or information
4. Provide an improved version if necessary

Return your response in JSON format:
{
  "suggestions": string[],
  "improvedContent": string (optional)
}"""
        try:
            response = await self.provider.generate(
                system_prompt, content, Temperature.PROSE, json_mode=True
            )
        except ProviderError as e:
            logger.error(f"Error suggesting edits: {e}")
            return EditSuggestions()

        data = parse_json_response(response.text)
        if not isinstance(data, dict):
            logger.error("Error suggesting edits: unparsable response")
            return EditSuggestions()

        suggestions = data.get("suggestions")
        improved = data.get("improvedContent")
        return EditSuggestions(
            suggestions=[s for s in suggestions if isinstance(s, str)] if isinstance(suggestions, list) else [],
            improved_content=improved if isinstance(improved, str) and improved.strip() else None,
        )


class PerplexityAIService(AIService):
    """
    Retrieval variant.

    Writes markdown with inline citations (no separate source discovery) and
    treats only an exact, case-insensitive title match as a duplicate.
    """

    def __init__(
        self,
        provider: ProviderClient,
        session: SessionProvider,
        moderation_classifier: Optional[ModerationClassifier] = None,
        image_finder: Optional[ImageFinder] = None,
        rng: Optional[random.Random] = None,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = datetime.now,
    ):
        categorizer = LineListCategorizer(provider)
        pipeline = ArticlePipeline(
            session=session,
            writer=RetrievalArticleWriter(provider),
            duplicate_detector=TitleMatchDuplicateDetector(),
            fact_checker=FactChecker(provider),
            moderator=ContentModerator(moderation_classifier or PromptModerationClassifier(provider)),
            categorizer=categorizer,
            image_finder=image_finder or SuggestedImageFinder(provider),
            source_finder=None,
            id_factory=id_factory,
            clock=clock,
        )
        super().__init__(provider, session, pipeline, categorizer, TopicExpander(provider), rng=rng)

    async def suggest_edits(self, content: str) -> EditSuggestions:
        system_prompt = """You are an expert editor. Review the content and suggest improvements.
Focus on:
1. Grammar and spelling
2. Clarity and readability
3. Structure and flow
4. Technical accuracy

List each suggestion on its own line starting with a hyphen (-).
If a rewrite helps, add a line "Improved content:" followed by the improved text."""
        try:
            response = await self.provider.generate(
                system_prompt, content, Temperature.RETRIEVAL_DEFAULT
            )
        except ProviderError as e:
            logger.error(f"Error suggesting edits: {e}")
            return EditSuggestions()

        text = response.text
        improved = None
        if "Improved content:" in text:
            text, improved = text.split("Improved content:", 1)
            improved = improved.strip() or None

        suggestions = [
            re.sub(r"^-\s*", "", line.strip())
            for line in text.split("\n")
            if line.strip().startswith("-")
        ]
        return EditSuggestions(suggestions=suggestions, improved_content=improved)


def create_ai_service(
    settings: Settings,
    session: SessionProvider,
    rng: Optional[random.Random] = None,
) -> AIService:
    """
    Build the AI service selected by ``settings.ai_provider``.

    Raises:
        ValueError: If the selected provider has no API key configured
    """
    timeout = settings.request_timeout_seconds

    image_finder = None
    if settings.has_openverse_credentials:
        image_finder = OpenverseImageFinder(
            OpenverseClient(
                client_id=settings.openverse_client_id,
                client_secret=settings.openverse_client_secret,
                base_url=settings.openverse_base_url,
                timeout=timeout,
            )
        )

    if settings.ai_provider == "perplexity":
        if not settings.perplexity_api_key:
            raise ValueError("PERPLEXITY_API_KEY not set")
        provider = PerplexityRetrievalClient(
            api_key=settings.perplexity_api_key,
            model=settings.perplexity_model,
            base_url=settings.perplexity_base_url,
            timeout=timeout,
        )
        moderation_classifier = None
        if settings.openai_api_key:
            moderation_classifier = OpenAIModerationClassifier(
                api_key=settings.openai_api_key,
                model=settings.openai_moderation_model,
            )
        logger.info(f"Using Perplexity service ({settings.perplexity_model})")
        return PerplexityAIService(
            provider,
            session,
            moderation_classifier=moderation_classifier,
            image_finder=image_finder,
            rng=rng,
        )

    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY not set")
    provider = OpenAICompletionClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=timeout,
    )
    logger.info(f"Using OpenAI service ({settings.openai_model})")
    return OpenAIService(
        provider,
        session,
        moderation_classifier=OpenAIModerationClassifier(
            api_key=settings.openai_api_key,
            model=settings.openai_moderation_model,
        ),
        image_finder=image_finder,
        rng=rng,
    )
