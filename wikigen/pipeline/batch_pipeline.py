"""
Batch Pipeline - generates several articles from one broad topic.

The topic is expanded into a pool of subtopics, which are drawn by weighted
random sampling and run one at a time through the Single-Article Pipeline.
"""

import logging
import random
from typing import Optional, Sequence

from ..auth.session import require_user
from ..models.article import Article, GenerationRequest
from ..models.verification import BatchResult
from ..topics.topic_expander import TopicExpander
from .article_pipeline import ArticlePipeline


logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1.0
FAILED_WEIGHT = 0.3
ATTEMPTS_PER_ARTICLE = 3
MIN_SUBTOPIC_POOL = 10


def weighted_choice(
    candidates: Sequence[str],
    weights: Sequence[float],
    rng: random.Random,
) -> str:
    """
    Pick one candidate with probability proportional to its weight.

    Draws a uniform value in [0, total weight) and returns the first
    candidate whose prefix sum exceeds it.
    """
    if not candidates:
        raise ValueError("No candidates to choose from")
    if len(candidates) != len(weights):
        raise ValueError("Candidates and weights must have the same length")

    prefix_sums = []
    running = 0.0
    for weight in weights:
        running += weight
        prefix_sums.append(running)

    draw = rng.random() * running
    for candidate, bound in zip(candidates, prefix_sums):
        if draw < bound:
            return candidate
    return candidates[-1]


class BatchPipeline:
    """
    Drives the Single-Article Pipeline across subtopics of one topic.

    Runs strictly sequentially so every attempt is duplicate-checked against
    the articles already produced in this batch. ``used`` subtopics and the
    failure map live only for the duration of one call.
    """

    def __init__(
        self,
        article_pipeline: ArticlePipeline,
        topic_expander: TopicExpander,
        rng: Optional[random.Random] = None,
    ):
        self.article_pipeline = article_pipeline
        self.topic_expander = topic_expander
        self.rng = rng or random.Random()

    async def generate_many(
        self,
        topic: str,
        count: int,
        existing_articles: Optional[list[Article]] = None,
        min_word_count: int = 500,
        max_word_count: int = 2000,
    ) -> list[Article]:
        result = await self.run(topic, count, existing_articles, min_word_count, max_word_count)
        return result.articles

    async def run(
        self,
        topic: str,
        count: int,
        existing_articles: Optional[list[Article]] = None,
        min_word_count: int = 500,
        max_word_count: int = 2000,
    ) -> BatchResult:
        """
        Generate up to ``count`` articles and report how the batch went.

        Raises:
            AuthenticationError: If no user is logged in when the batch starts
            ValueError: If the word-count range is invalid
        """
        request = GenerationRequest(
            topic=topic,
            existing_articles=existing_articles or [],
            min_word_count=min_word_count,
            max_word_count=max_word_count,
        )
        existing = list(request.existing_articles)
        report = BatchResult(topic=topic, requested=count)
        if count <= 0:
            return report

        require_user(self.article_pipeline.session)

        logger.info(f"Starting generation of {count} articles for topic: {topic}")

        subtopics = await self.topic_expander.expand(topic, max(count * 3, MIN_SUBTOPIC_POOL))
        report.subtopics = subtopics

        if not subtopics:
            logger.info("No subtopics generated, using original topic")
            report.used_fallback_topic = True
            report.attempts = 1
            try:
                article = await self.article_pipeline.generate_article(
                    topic, existing, request.min_word_count, request.max_word_count
                )
            except Exception as e:
                logger.error(f"Error generating article for {topic}: {e}")
                report.failed_attempts[topic] = str(e) or type(e).__name__
                return report
            if article:
                report.articles.append(article)
            else:
                report.failed_attempts[topic] = "Failed on attempt 1"
            return report

        used_subtopics: set[str] = set()
        failed_attempts: dict[str, str] = {}
        results: list[Article] = []
        max_attempts = count * ATTEMPTS_PER_ARTICLE
        attempts = 0

        while len(results) < count and attempts < max_attempts:
            available = [s for s in subtopics if s not in used_subtopics]
            if not available:
                logger.info("No more unique subtopics available")
                break

            attempts += 1
            weights = [FAILED_WEIGHT if s in failed_attempts else DEFAULT_WEIGHT for s in available]
            selected = weighted_choice(available, weights, self.rng)
            used_subtopics.add(selected)

            logger.info(f"Generating article for specific topic: {selected} (Attempt {attempts})")
            try:
                article = await self.article_pipeline.generate_article(
                    selected, existing + results, request.min_word_count, request.max_word_count
                )
            except Exception as e:
                logger.error(f"Error generating article for {selected}: {e}")
                failed_attempts[selected] = str(e) or type(e).__name__
                continue

            if article:
                logger.info(f"Successfully generated article for: {selected}")
                results.append(article)
            else:
                logger.error(f"Failed to generate article for: {selected}")
                failed_attempts[selected] = f"Failed on attempt {attempts}"

        if len(results) < count:
            logger.warning(
                f"Only generated {len(results)}/{count} articles after {attempts} attempts; "
                f"failed: {failed_attempts}"
            )

        logger.info(f"Generation complete. Generated {len(results)} articles")

        report.articles = results
        report.attempts = attempts
        report.failed_attempts = failed_attempts
        return report
