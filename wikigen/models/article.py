"""
Article models for the generation pipeline.
Represents generated articles, their versions, and the material attached to them.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator


INITIAL_VERSION_CHANGES = "Initial version generated by AI"


class ArticleStatus(str, Enum):
    """Lifecycle status of an article."""
    DRAFT = "draft"
    UNDER_REVIEW = "under_review"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ArticleTag(BaseModel):
    id: str
    name: str


class ArticleCategory(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class ArticleVersion(BaseModel):
    """A single revision of an article's content."""

    id: str
    content: str
    author: str
    timestamp: datetime = Field(default_factory=datetime.now)
    changes: str = INITIAL_VERSION_CHANGES


class ArticleImage(BaseModel):
    url: str
    attribution: str = ""
    description: str = ""
    index: Optional[int] = None


class InfoBox(BaseModel):
    """Small structured fact table shown beside an article."""

    title: str
    image: int = Field(default=0, description="Index into the article's images")
    key_facts: dict[str, str] = Field(default_factory=dict)

    @field_validator("key_facts", mode="before")
    @classmethod
    def stringify_key_facts(cls, value):
        """Scalar values become strings; None and nested values are dropped."""
        if not isinstance(value, dict):
            return value
        return {
            str(label): str(fact)
            for label, fact in value.items()
            if isinstance(fact, (str, int, float, bool))
        }


class Citation(BaseModel):
    """A numbered citation returned by a retrieval provider."""

    id: int
    url: str
    title: str = ""


class Source(BaseModel):
    """
    A research source handed to the fact-verification gate.
    The pipeline treats it as opaque beyond passing it along.
    """

    url: str
    title: str = ""
    publisher: str = ""
    type: str = ""
    year: Optional[str] = None

    @classmethod
    def from_citation(cls, citation: Citation) -> "Source":
        return cls(url=citation.url, title=citation.title, type="web")


class Article(BaseModel):
    """
    An encyclopedia article.

    Generated articles come back without an ``id``; the article store
    assigns one when it persists them.
    """

    id: Optional[str] = None
    title: str
    content: str = ""
    status: ArticleStatus = ArticleStatus.DRAFT
    author: str = ""

    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Classification
    categories: list[ArticleCategory] = Field(default_factory=list)
    tags: list[ArticleTag] = Field(default_factory=list)

    # History
    versions: list[ArticleVersion] = Field(default_factory=list)
    current_version: Optional[str] = None

    # Media and facts
    images: list[ArticleImage] = Field(default_factory=list)
    infobox: Optional[InfoBox] = None

    # Provenance
    is_ai_generated: bool = False
    categories_locked_by_ai: bool = False
    citations: list[Citation] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)

    @property
    def word_count(self) -> int:
        return len(self.content.split())


class GenerationRequest(BaseModel):
    """Parameters for one article generation attempt."""

    topic: str
    existing_articles: list[Article] = Field(default_factory=list)
    min_word_count: int = 500
    max_word_count: int = 2000

    @model_validator(mode="after")
    def check_word_counts(self) -> "GenerationRequest":
        if self.min_word_count <= 0 or self.max_word_count <= 0:
            raise ValueError("Word counts must be positive")
        if self.min_word_count > self.max_word_count:
            raise ValueError(
                f"min_word_count ({self.min_word_count}) exceeds "
                f"max_word_count ({self.max_word_count})"
            )
        return self
