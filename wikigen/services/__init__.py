"""Article generation services."""

from .ai_service import AIService, OpenAIService, PerplexityAIService, create_ai_service

__all__ = ["AIService", "OpenAIService", "PerplexityAIService", "create_ai_service"]
