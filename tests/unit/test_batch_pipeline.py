"""
Unit tests for the Batch Pipeline and weighted subtopic sampling.
"""

import random
import pytest


class FakeExpander:
    def __init__(self, subtopics):
        self.subtopics = subtopics
        self.requests = []

    async def expand(self, topic, desired_count):
        self.requests.append((topic, desired_count))
        return list(self.subtopics)


class FakeArticlePipeline:
    """Stands in for ArticlePipeline; ``outcome`` maps a topic to an Article, None, or an exception."""

    def __init__(self, session, outcome=None):
        self.session = session
        self.outcome = outcome or (lambda topic: self._article(topic))
        self.calls = []

    @staticmethod
    def _article(topic):
        from wikigen.models import Article

        return Article(title=topic, content=f"{topic} is a subject.", is_ai_generated=True)

    async def generate_article(self, topic, existing_articles=None, min_word_count=500, max_word_count=2000):
        self.calls.append({
            "topic": topic,
            "existing": [a.title for a in existing_articles or []],
            "min": min_word_count,
            "max": max_word_count,
        })
        result = self.outcome(topic)
        if isinstance(result, Exception):
            raise result
        return result


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


POOL = ["Arabica", "Robusta", "Espresso", "Latte", "Cold brew"]


@pytest.mark.unit
class TestWeightedChoice:
    """Tests for cumulative-weight sampling."""

    def test_draw_lands_in_prefix_interval(self):
        from wikigen.pipeline import weighted_choice

        candidates = ["a", "b", "c"]
        weights = [1.0, 0.3, 1.0]

        assert weighted_choice(candidates, weights, FixedRandom(0.0)) == "a"
        assert weighted_choice(candidates, weights, FixedRandom(0.5)) == "b"
        assert weighted_choice(candidates, weights, FixedRandom(0.99)) == "c"

    def test_single_candidate(self):
        from wikigen.pipeline import weighted_choice

        assert weighted_choice(["only"], [0.3], random.Random(1)) == "only"

    def test_invalid_input(self):
        from wikigen.pipeline import weighted_choice

        with pytest.raises(ValueError):
            weighted_choice([], [], random.Random(1))
        with pytest.raises(ValueError):
            weighted_choice(["a", "b"], [1.0], random.Random(1))

    def test_lower_weight_drawn_less_often(self):
        from wikigen.pipeline import weighted_choice

        rng = random.Random(7)
        picks = [weighted_choice(["ok", "failed"], [1.0, 0.3], rng) for _ in range(2000)]
        assert picks.count("failed") < picks.count("ok")


@pytest.mark.unit
class TestBatchPipeline:
    """Tests for generate_many / run."""

    @pytest.mark.asyncio
    async def test_generates_requested_count_without_repeats(self, session):
        from wikigen.pipeline import BatchPipeline

        articles = FakeArticlePipeline(session)
        expander = FakeExpander(POOL)
        batch = BatchPipeline(articles, expander, rng=random.Random(3))

        result = await batch.generate_many("Coffee", 3)

        assert len(result) == 3
        picked = [call["topic"] for call in articles.calls]
        assert len(set(picked)) == len(picked) == 3
        assert set(picked) <= set(POOL)

    @pytest.mark.asyncio
    async def test_all_failures_terminate(self, session):
        from wikigen.pipeline import BatchPipeline

        articles = FakeArticlePipeline(session, outcome=lambda topic: None)
        batch = BatchPipeline(articles, FakeExpander(POOL), rng=random.Random(3))

        report = await batch.run("Coffee", 3)

        assert report.articles == []
        assert report.attempts <= 3 * 3
        picked = [call["topic"] for call in articles.calls]
        assert len(set(picked)) == len(picked)
        assert sorted(picked) == sorted(POOL)
        assert set(report.failed_attempts) == set(POOL)
        assert report.shortfall == 3

    @pytest.mark.asyncio
    async def test_attempt_cap_with_large_pool(self, session):
        from wikigen.pipeline import BatchPipeline

        pool = [f"Subtopic {i}" for i in range(20)]
        articles = FakeArticlePipeline(session, outcome=lambda topic: None)
        batch = BatchPipeline(articles, FakeExpander(pool), rng=random.Random(3))

        report = await batch.run("Coffee", 3)

        assert report.attempts == 9
        assert len(articles.calls) == 9

    @pytest.mark.asyncio
    async def test_never_more_than_requested(self, session):
        from wikigen.pipeline import BatchPipeline

        articles = FakeArticlePipeline(session)
        batch = BatchPipeline(articles, FakeExpander(POOL), rng=random.Random(11))

        result = await batch.generate_many("Coffee", 3)

        assert len(result) == 3
        assert len(articles.calls) == 3

    @pytest.mark.asyncio
    async def test_pool_size_requested(self, session):
        from wikigen.pipeline import BatchPipeline

        expander = FakeExpander(POOL)
        batch = BatchPipeline(FakeArticlePipeline(session), expander, rng=random.Random(1))

        await batch.run("Coffee", 2)
        await batch.run("Coffee", 5)

        assert expander.requests == [("Coffee", 10), ("Coffee", 15)]

    @pytest.mark.asyncio
    async def test_earlier_results_count_as_existing(self, session, sample_articles):
        from wikigen.pipeline import BatchPipeline

        articles = FakeArticlePipeline(session)
        batch = BatchPipeline(articles, FakeExpander(POOL), rng=random.Random(5))

        await batch.generate_many("Coffee", 3, existing_articles=sample_articles, min_word_count=300, max_word_count=900)

        first, second, third = articles.calls
        assert first["existing"] == ["Coffee", "Tea"]
        assert second["existing"] == ["Coffee", "Tea", first["topic"]]
        assert third["existing"] == ["Coffee", "Tea", first["topic"], second["topic"]]
        assert (first["min"], first["max"]) == (300, 900)

    @pytest.mark.asyncio
    async def test_attempt_exception_recorded(self, session):
        from wikigen.pipeline import BatchPipeline

        def outcome(topic):
            if topic == "Espresso":
                return RuntimeError("connection reset")
            return FakeArticlePipeline._article(topic)

        articles = FakeArticlePipeline(session, outcome=outcome)
        batch = BatchPipeline(articles, FakeExpander(POOL), rng=random.Random(2))

        report = await batch.run("Coffee", 5)

        assert len(report.articles) == 4
        assert report.failed_attempts == {"Espresso": "connection reset"}

    @pytest.mark.asyncio
    async def test_empty_pool_falls_back_to_topic(self, session):
        from wikigen.pipeline import BatchPipeline

        articles = FakeArticlePipeline(session)
        batch = BatchPipeline(articles, FakeExpander([]))

        report = await batch.run("Coffee", 3)

        assert report.used_fallback_topic is True
        assert report.attempts == 1
        assert [a.title for a in report.articles] == ["Coffee"]
        assert [call["topic"] for call in articles.calls] == ["Coffee"]

    @pytest.mark.asyncio
    async def test_empty_pool_fallback_failure(self, session):
        from wikigen.pipeline import BatchPipeline

        articles = FakeArticlePipeline(session, outcome=lambda topic: None)
        report = await BatchPipeline(articles, FakeExpander([])).run("Coffee", 3)

        assert report.articles == []
        assert report.failed_attempts == {"Coffee": "Failed on attempt 1"}

    @pytest.mark.asyncio
    async def test_missing_user_raises_before_expansion(self, anonymous_session):
        from wikigen.auth import AuthenticationError
        from wikigen.pipeline import BatchPipeline

        expander = FakeExpander(POOL)
        batch = BatchPipeline(FakeArticlePipeline(anonymous_session), expander)

        with pytest.raises(AuthenticationError):
            await batch.generate_many("Coffee", 3)
        assert expander.requests == []

    @pytest.mark.asyncio
    async def test_zero_count(self, session):
        from wikigen.pipeline import BatchPipeline

        expander = FakeExpander(POOL)
        report = await BatchPipeline(FakeArticlePipeline(session), expander).run("Coffee", 0)

        assert report.articles == []
        assert report.attempts == 0
        assert expander.requests == []

    @pytest.mark.asyncio
    async def test_invalid_word_counts(self, session):
        from wikigen.pipeline import BatchPipeline

        expander = FakeExpander(POOL)
        batch = BatchPipeline(FakeArticlePipeline(session), expander)
        with pytest.raises(ValueError):
            await batch.generate_many("Coffee", 3, min_word_count=900, max_word_count=300)
        assert expander.requests == []
