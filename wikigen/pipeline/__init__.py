"""Generation pipelines: one article, or a batch of articles from one topic."""

from .writers import ArticleDraft, ArticleWriter, JsonArticleWriter, RetrievalArticleWriter
from .article_pipeline import ArticlePipeline, PipelineStage, new_id
from .batch_pipeline import BatchPipeline, weighted_choice

__all__ = [
    "ArticleDraft",
    "ArticleWriter",
    "JsonArticleWriter",
    "RetrievalArticleWriter",
    "ArticlePipeline",
    "PipelineStage",
    "new_id",
    "BatchPipeline",
    "weighted_choice",
]
