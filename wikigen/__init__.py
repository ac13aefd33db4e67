"""
wikigen - AI-assisted encyclopedia article generation.

Single articles and batches are produced by an AIService built from
Settings; every article passes duplicate, fact and moderation gates
before it is assembled.
"""

from .auth import AuthenticationError, StaticSessionProvider, UserIdentity
from .config import Settings, get_settings, run_startup_validation
from .models import Article, BatchResult, GenerationRequest
from .services import AIService, OpenAIService, PerplexityAIService, create_ai_service

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "StaticSessionProvider",
    "UserIdentity",
    "Settings",
    "get_settings",
    "run_startup_validation",
    "Article",
    "BatchResult",
    "GenerationRequest",
    "AIService",
    "OpenAIService",
    "PerplexityAIService",
    "create_ai_service",
]
