"""Data models for the article generation pipeline."""

from .article import (
    Article,
    ArticleCategory,
    ArticleImage,
    ArticleStatus,
    ArticleTag,
    ArticleVersion,
    Citation,
    GenerationRequest,
    InfoBox,
    Source,
    INITIAL_VERSION_CHANGES,
)
from .verification import (
    BatchResult,
    Categorization,
    DuplicateCheckResult,
    EditSuggestions,
    ModerationDecision,
    ModerationResult,
    SimilarArticle,
    VerificationResult,
)

__all__ = [
    # Article models
    "Article",
    "ArticleCategory",
    "ArticleImage",
    "ArticleStatus",
    "ArticleTag",
    "ArticleVersion",
    "Citation",
    "GenerationRequest",
    "InfoBox",
    "Source",
    "INITIAL_VERSION_CHANGES",
    # Verification models
    "BatchResult",
    "Categorization",
    "DuplicateCheckResult",
    "EditSuggestions",
    "ModerationDecision",
    "ModerationResult",
    "SimilarArticle",
    "VerificationResult",
]
