"""
Single-Article Pipeline - one generation attempt for one topic.

Stages run in strict order and any gate can abort the attempt:

    auth check -> early duplicate check -> source discovery -> image discovery
    -> content generation -> final duplicate check -> fact verification
    -> moderation -> categorization -> assembly

An attempt ends with a complete Article or None. Only a missing user raises.
"""

import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from ..auth.session import SessionProvider, require_user
from ..models.article import (
    Article,
    ArticleCategory,
    ArticleStatus,
    ArticleTag,
    ArticleVersion,
    GenerationRequest,
    INITIAL_VERSION_CHANGES,
)
from ..models.verification import Categorization
from ..research.categorizer import Categorizer
from ..research.images import ImageFinder
from ..research.sources import SourceFinder
from ..verification.duplicates import DuplicateDetector
from ..verification.fact_checker import FactChecker
from ..verification.moderation import ContentModerator
from .writers import ArticleDraft, ArticleWriter


logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


class PipelineStage(str, Enum):
    AUTH_CHECK = "auth_check"
    EARLY_DUPLICATE_CHECK = "early_duplicate_check"
    SOURCE_DISCOVERY = "source_discovery"
    IMAGE_DISCOVERY = "image_discovery"
    CONTENT_GENERATION = "content_generation"
    FINAL_DUPLICATE_CHECK = "final_duplicate_check"
    FACT_VERIFICATION = "fact_verification"
    MODERATION = "moderation"
    CATEGORIZATION = "categorization"
    ASSEMBLY = "assembly"


class ArticlePipeline:
    """
    Composes provider calls and gates into one generation attempt.

    ``source_finder`` is optional: retrieval providers embed citations in
    their output, so source discovery is skipped and the draft's citations
    are handed to fact verification instead.
    """

    def __init__(
        self,
        session: SessionProvider,
        writer: ArticleWriter,
        duplicate_detector: DuplicateDetector,
        fact_checker: FactChecker,
        moderator: ContentModerator,
        categorizer: Categorizer,
        image_finder: ImageFinder,
        source_finder: Optional[SourceFinder] = None,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session = session
        self.writer = writer
        self.duplicate_detector = duplicate_detector
        self.fact_checker = fact_checker
        self.moderator = moderator
        self.categorizer = categorizer
        self.image_finder = image_finder
        self.source_finder = source_finder
        self.id_factory = id_factory
        self.clock = clock

    async def generate_article(
        self,
        topic: str,
        existing_articles: Optional[list[Article]] = None,
        min_word_count: int = 500,
        max_word_count: int = 2000,
    ) -> Optional[Article]:
        """
        Generate one article.

        Raises:
            AuthenticationError: If no user is logged in
            ValueError: If the word-count range is invalid
        """
        request = GenerationRequest(
            topic=topic,
            existing_articles=existing_articles or [],
            min_word_count=min_word_count,
            max_word_count=max_word_count,
        )
        return await self.run(request)

    async def run(self, request: GenerationRequest) -> Optional[Article]:
        topic = request.topic
        existing = request.existing_articles

        user = require_user(self.session)

        early_check = await self.duplicate_detector.check(topic, "", existing)
        if early_check.is_duplicate:
            return self._abort(PipelineStage.EARLY_DUPLICATE_CHECK, topic, early_check.reason)

        sources = []
        if self.source_finder is not None:
            sources = await self.source_finder.find_sources(topic)
            if not sources:
                return self._abort(PipelineStage.SOURCE_DISCOVERY, topic, "No sources found")

        images = await self.image_finder.find_images(topic)

        draft = await self.writer.write(
            topic, sources, request.min_word_count, request.max_word_count
        )
        if draft is None or not draft.content.strip():
            return self._abort(PipelineStage.CONTENT_GENERATION, topic, "No usable content generated")

        final_check = await self.duplicate_detector.check(draft.title, draft.content, existing)
        if final_check.is_duplicate:
            return self._abort(PipelineStage.FINAL_DUPLICATE_CHECK, topic, final_check.reason)

        verification = await self.fact_checker.verify(
            draft.content, sources or draft.citation_sources
        )
        if not verification.verified:
            return self._abort(
                PipelineStage.FACT_VERIFICATION,
                topic,
                f"Failed to verify article facts (score {verification.score:.0f})",
            )

        moderation = await self.moderator.moderate(draft.content)
        if not moderation.is_appropriate:
            return self._abort(
                PipelineStage.MODERATION,
                topic,
                f"Content flagged during moderation: {moderation.reason}",
            )

        categorization = await self.categorizer.categorize(draft.content)

        article = self._assemble(draft, categorization, images, user.author_name)
        logger.info(
            f"Generated article '{article.title}' ({article.word_count} words, "
            f"{len(article.categories)} categories)"
        )
        return article

    def _abort(self, stage: PipelineStage, topic: str, reason: Optional[str]) -> None:
        logger.error(f"Aborted generation for '{topic}' at {stage.value}: {reason or 'no reason given'}")
        return None

    def _assemble(
        self,
        draft: ArticleDraft,
        categorization: Categorization,
        images: list,
        author: str,
    ) -> Article:
        now = self.clock()
        version = ArticleVersion(
            id=self.id_factory(),
            content=draft.content,
            author=author,
            timestamp=now,
            changes=INITIAL_VERSION_CHANGES,
        )

        return Article(
            title=draft.title,
            content=draft.content,
            status=ArticleStatus.DRAFT,
            author=author,
            created_at=now,
            updated_at=now,
            categories=[
                ArticleCategory(id=self.id_factory(), name=name)
                for name in categorization.categories
            ],
            tags=[ArticleTag(id=self.id_factory(), name=name) for name in categorization.tags],
            versions=[version],
            current_version=version.id,
            images=images,
            infobox=draft.infobox,
            is_ai_generated=True,
            categories_locked_by_ai=True,
            citations=draft.citations,
            references=draft.references,
        )
