"""
Unit tests for the duplicate, fact and moderation gates.
"""

import pytest


@pytest.mark.unit
class TestSimilarityDuplicateDetector:
    """Tests for the model-scored duplicate check."""

    @pytest.mark.asyncio
    async def test_duplicate_detected(self, provider_factory, keys, sample_articles):
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: {
            "isDuplicate": True,
            "similarity_score": 92,
            "similar_articles": [{"id": "a-1", "title": "Coffee", "similarity": 92}],
            "reason": "Same subject",
        }})
        result = await SimilarityDuplicateDetector(provider).check("Coffee", "", sample_articles)

        assert result.is_duplicate is True
        assert result.similar_articles[0].id == "a-1"
        assert result.reason == "Same subject"

    @pytest.mark.asyncio
    async def test_prompt_carries_candidate_and_existing(self, provider_factory, keys, sample_articles):
        from wikigen.providers.base import Temperature
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: {"isDuplicate": False}})
        await SimilarityDuplicateDetector(provider).check("Espresso", "Body text", sample_articles)

        call = provider.calls[0]
        assert "Title: Espresso" in call["user_prompt"]
        assert "Content: Body text" in call["user_prompt"]
        assert '"title": "Tea"' in call["user_prompt"]
        assert call["temperature"] == Temperature.RESEARCH
        assert call["json_mode"] is True

    @pytest.mark.asyncio
    async def test_non_boolean_flag_is_not_duplicate(self, provider_factory, keys):
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: {"isDuplicate": "true"}})
        result = await SimilarityDuplicateDetector(provider).check("Coffee", "", [])
        assert result.is_duplicate is False

    @pytest.mark.asyncio
    async def test_provider_failure_fails_open(self, provider_factory, keys):
        from wikigen.providers.base import ProviderError
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: ProviderError("scripted", "timeout")})
        result = await SimilarityDuplicateDetector(provider).check("Coffee", "", [])
        assert result.is_duplicate is False

    @pytest.mark.asyncio
    async def test_unparsable_response_fails_open(self, provider_factory, keys):
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: "I think it might be a duplicate."})
        result = await SimilarityDuplicateDetector(provider).check("Coffee", "", [])
        assert result.is_duplicate is False

    @pytest.mark.asyncio
    async def test_numeric_id_keeps_verdict(self, provider_factory, keys):
        from wikigen.models import Article
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: {
            "isDuplicate": True,
            "similar_articles": [{"id": 7, "title": "Coffee", "similarity": 95}],
        }})
        result = await SimilarityDuplicateDetector(provider).check(
            "Coffee", "", [Article(id="7", title="Coffee")]
        )

        assert result.is_duplicate is True
        assert result.similar_articles[0].id == "7"
        assert result.similar_articles[0].similarity == 95.0

    @pytest.mark.asyncio
    async def test_null_id_and_title_keep_verdict(self, provider_factory, keys, sample_articles):
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: {
            "isDuplicate": True,
            "similar_articles": [{"id": None, "title": None, "similarity": 88}],
        }})
        result = await SimilarityDuplicateDetector(provider).check("Coffee", "", sample_articles)

        assert result.is_duplicate is True
        assert result.similar_articles[0].id is None
        assert result.similar_articles[0].title == ""

    @pytest.mark.asyncio
    async def test_string_similarity(self, provider_factory, keys, sample_articles):
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: {
            "isDuplicate": True,
            "similar_articles": [
                {"id": "a-1", "title": "Coffee", "similarity": "91"},
                {"id": "a-2", "title": "Tea", "similarity": "high"},
            ],
        }})
        result = await SimilarityDuplicateDetector(provider).check("Coffee", "", sample_articles)

        assert result.is_duplicate is True
        assert [a.similarity for a in result.similar_articles] == [91.0, 0.0]

    @pytest.mark.asyncio
    async def test_similar_articles_not_a_list(self, provider_factory, keys, sample_articles):
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: {
            "isDuplicate": True,
            "similar_articles": {"id": "a-1", "title": "Coffee"},
            "reason": 42,
        }})
        result = await SimilarityDuplicateDetector(provider).check("Coffee", "", sample_articles)

        assert result.is_duplicate is True
        assert result.similar_articles == []
        assert result.reason == "42"

    @pytest.mark.asyncio
    async def test_non_object_entries_skipped(self, provider_factory, keys, sample_articles):
        from wikigen.verification import SimilarityDuplicateDetector

        provider = provider_factory({keys.duplicate: {
            "isDuplicate": True,
            "similar_articles": ["Coffee", {"id": "a-1", "title": "Coffee", "similarity": 90}],
        }})
        result = await SimilarityDuplicateDetector(provider).check("Coffee", "", sample_articles)

        assert result.is_duplicate is True
        assert [a.id for a in result.similar_articles] == ["a-1"]


@pytest.mark.unit
class TestTitleMatchDuplicateDetector:
    """Tests for the exact-title duplicate check."""

    @pytest.mark.asyncio
    async def test_case_insensitive_match(self, sample_articles):
        from wikigen.verification import TitleMatchDuplicateDetector

        result = await TitleMatchDuplicateDetector().check(" coffee ", "", sample_articles)

        assert result.is_duplicate is True
        assert result.similar_articles[0].id == "a-1"
        assert result.similar_articles[0].similarity == 100.0

    @pytest.mark.asyncio
    async def test_similar_title_is_not_duplicate(self, sample_articles):
        from wikigen.verification import TitleMatchDuplicateDetector

        result = await TitleMatchDuplicateDetector().check("Coffee culture", "Coffee is a drink.", sample_articles)
        assert result.is_duplicate is False

    @pytest.mark.asyncio
    async def test_no_existing_articles(self):
        from wikigen.verification import TitleMatchDuplicateDetector

        result = await TitleMatchDuplicateDetector().check("Coffee", "", [])
        assert result.is_duplicate is False


@pytest.mark.unit
class TestFactChecker:
    """Tests for fact verification."""

    @pytest.mark.asyncio
    async def test_verified(self, provider_factory, keys):
        from wikigen.models import Source
        from wikigen.verification import FactChecker

        provider = provider_factory({keys.fact_check: {"verified": True, "score": 85, "analysis": {}}})
        sources = [Source(url="https://www.ncausa.org/history", title="History of Coffee")]
        result = await FactChecker(provider).verify("Coffee is a drink.", sources)

        assert result.verified is True
        assert result.score == 85
        assert "https://www.ncausa.org/history" in provider.calls[0]["user_prompt"]

    @pytest.mark.asyncio
    async def test_unverified(self, provider_factory, keys):
        from wikigen.verification import FactChecker

        provider = provider_factory({keys.fact_check: {
            "verified": False,
            "score": 40,
            "analysis": {"unverified_claims": ["Coffee was invented in 1990"]},
        }})
        result = await FactChecker(provider).verify("Coffee was invented in 1990.", [])

        assert result.verified is False
        assert result.analysis["unverified_claims"] == ["Coffee was invented in 1990"]

    @pytest.mark.asyncio
    async def test_boolean_trusted_over_score(self, provider_factory, keys):
        from wikigen.verification import FactChecker

        provider = provider_factory({keys.fact_check: {"verified": True, "score": 20}})
        result = await FactChecker(provider).verify("text", [])
        assert result.verified is True

    @pytest.mark.asyncio
    async def test_provider_failure_fails_closed(self, provider_factory, keys):
        from wikigen.providers.base import ProviderError
        from wikigen.verification import FactChecker

        provider = provider_factory({keys.fact_check: ProviderError("scripted", "503")})
        result = await FactChecker(provider).verify("text", [])
        assert result.verified is False

    @pytest.mark.asyncio
    async def test_unparsable_fails_closed(self, provider_factory, keys):
        from wikigen.verification import FactChecker

        provider = provider_factory({keys.fact_check: "Looks right to me."})
        result = await FactChecker(provider).verify("text", [])
        assert result.verified is False


@pytest.mark.unit
class TestContentModerator:
    """Tests for the moderation gate."""

    @pytest.mark.asyncio
    async def test_clean_content_passes(self, moderation_factory):
        from wikigen.models import ModerationResult
        from wikigen.verification import ContentModerator

        classifier = moderation_factory(ModerationResult(flagged=False, categories={"hate": False}))
        decision = await ContentModerator(classifier).moderate("Coffee is a drink.")

        assert decision.is_appropriate is True
        assert classifier.calls == ["Coffee is a drink."]

    @pytest.mark.asyncio
    async def test_flagged_content_names_categories(self, moderation_factory):
        from wikigen.models import ModerationResult
        from wikigen.verification import ContentModerator

        classifier = moderation_factory(ModerationResult(
            flagged=True,
            categories={"hate": False, "violence": True, "harassment": True},
        ))
        decision = await ContentModerator(classifier).moderate("text")

        assert decision.is_appropriate is False
        assert decision.reason == "violence, harassment"

    @pytest.mark.asyncio
    async def test_any_category_flag_blocks(self, moderation_factory):
        from wikigen.models import ModerationResult
        from wikigen.verification import ContentModerator

        classifier = moderation_factory(ModerationResult(flagged=False, categories={"violence": True}))
        decision = await ContentModerator(classifier).moderate("text")
        assert decision.is_appropriate is False

    @pytest.mark.asyncio
    async def test_classifier_error_fails_closed(self, moderation_factory):
        from wikigen.providers.base import ProviderError
        from wikigen.verification import ContentModerator, MODERATION_ERROR_REASON

        classifier = moderation_factory(error=ProviderError("openai-moderation", "unreachable"))
        decision = await ContentModerator(classifier).moderate("text")

        assert decision.is_appropriate is False
        assert decision.reason == MODERATION_ERROR_REASON


@pytest.mark.unit
class TestPromptModerationClassifier:
    """Tests for the language-model moderation fallback."""

    @pytest.mark.asyncio
    async def test_parses_verdict(self, provider_factory, keys):
        from wikigen.verification import PromptModerationClassifier

        provider = provider_factory({keys.prompt_moderation: {
            "flagged": True,
            "categories": {"violence": True, "hate": False},
        }})
        result = await PromptModerationClassifier(provider).classify("text")

        assert result.flagged is True
        assert result.flagged_categories == ["violence"]

    @pytest.mark.asyncio
    async def test_missing_flag_raises(self, provider_factory, keys):
        from wikigen.verification import PromptModerationClassifier

        provider = provider_factory({keys.prompt_moderation: {"categories": {}}})
        with pytest.raises(ValueError):
            await PromptModerationClassifier(provider).classify("text")

    @pytest.mark.asyncio
    async def test_unparsable_verdict_blocks_content(self, provider_factory, keys):
        from wikigen.verification import ContentModerator, PromptModerationClassifier

        provider = provider_factory({keys.prompt_moderation: "Seems fine."})
        decision = await ContentModerator(PromptModerationClassifier(provider)).moderate("text")
        assert decision.is_appropriate is False
