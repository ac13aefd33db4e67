"""Provider clients for language models, moderation and image search."""

from .base import (
    ModerationClassifier,
    ProviderClient,
    ProviderError,
    ProviderResponse,
    Temperature,
    parse_json_response,
)
from .openai_client import OpenAICompletionClient, OpenAIModerationClassifier
from .perplexity_client import PerplexityRetrievalClient
from .openverse import OpenverseAuthError, OpenverseClient, OpenverseCredential, OpenverseImage

__all__ = [
    "ModerationClassifier",
    "ProviderClient",
    "ProviderError",
    "ProviderResponse",
    "Temperature",
    "parse_json_response",
    "OpenAICompletionClient",
    "OpenAIModerationClassifier",
    "PerplexityRetrievalClient",
    "OpenverseAuthError",
    "OpenverseClient",
    "OpenverseCredential",
    "OpenverseImage",
]
