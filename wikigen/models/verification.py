"""
Verification and reporting models.
Results of the duplicate, fact and moderation gates, plus batch reporting.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .article import Article


class SimilarArticle(BaseModel):
    """An existing article that resembles a candidate."""

    id: Optional[str] = None
    title: str = ""
    similarity: float = Field(default=0.0, ge=0.0, le=100.0)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return None if value is None else str(value)

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, value):
        return "" if value is None else str(value)

    @field_validator("similarity", mode="before")
    @classmethod
    def clamp_similarity(cls, value):
        try:
            return min(max(float(value), 0.0), 100.0)
        except (TypeError, ValueError):
            return 0.0


class DuplicateCheckResult(BaseModel):
    is_duplicate: bool = False
    similar_articles: list[SimilarArticle] = Field(default_factory=list)
    reason: Optional[str] = None


class VerificationResult(BaseModel):
    """
    Outcome of fact verification.
    Only ``verified`` drives the pipeline; score and analysis are diagnostic.
    """

    verified: bool = False
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    analysis: dict = Field(default_factory=dict)

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, value):
        try:
            return min(max(float(value), 0.0), 100.0)
        except (TypeError, ValueError):
            return 0.0


class ModerationResult(BaseModel):
    """Raw classifier output: overall flag and per-category flags."""

    flagged: bool = False
    categories: dict[str, bool] = Field(default_factory=dict)

    @property
    def flagged_categories(self) -> list[str]:
        return [name for name, hit in self.categories.items() if hit]


class ModerationDecision(BaseModel):
    is_appropriate: bool
    reason: Optional[str] = None


class Categorization(BaseModel):
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class EditSuggestions(BaseModel):
    suggestions: list[str] = Field(default_factory=list)
    improved_content: Optional[str] = None


class BatchResult(BaseModel):
    """
    Report for one batch run.
    Falling short of ``requested`` is a normal outcome, not an error.
    """

    topic: str
    requested: int
    articles: list[Article] = Field(default_factory=list)
    attempts: int = 0
    subtopics: list[str] = Field(default_factory=list)
    failed_attempts: dict[str, str] = Field(default_factory=dict)
    used_fallback_topic: bool = False

    @property
    def shortfall(self) -> int:
        return max(self.requested - len(self.articles), 0)
