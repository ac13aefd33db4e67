"""Verification gates: duplicates, facts and moderation."""

from .duplicates import DuplicateDetector, SimilarityDuplicateDetector, TitleMatchDuplicateDetector
from .fact_checker import FactChecker
from .moderation import ContentModerator, PromptModerationClassifier, MODERATION_ERROR_REASON

__all__ = [
    "DuplicateDetector",
    "SimilarityDuplicateDetector",
    "TitleMatchDuplicateDetector",
    "FactChecker",
    "ContentModerator",
    "PromptModerationClassifier",
    "MODERATION_ERROR_REASON",
]
