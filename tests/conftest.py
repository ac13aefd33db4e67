"""
Pytest configuration and fixtures for wikigen tests.
"""

import sys
import json
import pytest
from pathlib import Path
from datetime import datetime

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wikigen.auth.session import StaticSessionProvider, UserIdentity
from wikigen.models.verification import ModerationResult
from wikigen.providers.base import ModerationClassifier, ProviderClient, ProviderError, ProviderResponse


# ============================================================
# Fake providers
# ============================================================

class ScriptedProvider(ProviderClient):
    """
    Provider that answers by matching a key against the system prompt.

    A script value may be a string, a dict/list (sent as JSON), a
    ProviderResponse, an exception instance (raised), a callable taking the
    user prompt, or a list of those wrapped in ``ScriptedProvider.sequence``
    (consumed in order, last one repeats). Unmatched prompts raise
    ProviderError.
    """

    name = "scripted"

    class sequence(list):
        pass

    def __init__(self, script=None):
        self.script = dict(script or {})
        self.calls = []
        self.closed = False

    def _resolve(self, system_prompt):
        for key, value in self.script.items():
            if key in system_prompt:
                if isinstance(value, ScriptedProvider.sequence):
                    return value.pop(0) if len(value) > 1 else value[0]
                return value
        return ProviderError(self.name, "no scripted response")

    async def generate(self, system_prompt, user_prompt, temperature, json_mode=False):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "json_mode": json_mode,
        })
        value = self._resolve(system_prompt)
        if callable(value) and not isinstance(value, type):
            value = value(user_prompt)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, ProviderResponse):
            return value
        if isinstance(value, (dict, list)):
            return ProviderResponse(text=json.dumps(value))
        return ProviderResponse(text=value)

    def calls_matching(self, key):
        return [call for call in self.calls if key in call["system_prompt"]]

    async def aclose(self):
        self.closed = True


class FakeModerationClassifier(ModerationClassifier):
    """Returns a fixed moderation result (or raises) and records inputs."""

    def __init__(self, result=None, error=None):
        self.result = result or ModerationResult(flagged=False)
        self.error = error
        self.calls = []
        self.closed = False

    async def classify(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.result

    async def aclose(self):
        self.closed = True


# Prompt keys for each component
DUPLICATE_KEY = "duplicate content detection"
SOURCES_KEY = "Search for reliable"
IMAGES_KEY = "free-to-use images"
JSON_ARTICLE_KEY = "expert encyclopedia article writer with fact-checking"
FACT_CHECK_KEY = "fact-checking assistant"
PROMPT_MODERATION_KEY = "content moderation classifier"
HIERARCHICAL_CATEGORIES_KEY = "encyclopedia categorization expert"
LINE_CATEGORIES_KEY = "content categorization expert"
TOPICS_KEY = "topic research expert"
KEY_FACTS_KEY = "factual information extractor"
RETRIEVAL_ARTICLE_KEY = "Wikipedia's style and conventions"


COFFEE_CONTENT = (
    "Coffee is a brewed drink prepared from roasted coffee beans [1].\n\n"
    "## History\n\n"
    "The earliest credible evidence of coffee drinking appears in Yemen [2]."
)


def completion_script(**overrides):
    """A completion-variant script where every gate passes."""
    script = {
        DUPLICATE_KEY: {"isDuplicate": False, "similarity_score": 5, "similar_articles": []},
        SOURCES_KEY: {"sources": [{
            "url": "https://www.ncausa.org/history",
            "title": "History of Coffee",
            "publisher": "National Coffee Association",
            "type": "professional",
            "year": 2021,
        }]},
        IMAGES_KEY: {"images": [{
            "url": "https://upload.wikimedia.org/coffee.jpg",
            "attribution": "CC BY-SA 4.0",
            "description": "A cup of coffee",
        }]},
        JSON_ARTICLE_KEY: {
            "title": "Coffee",
            "content": COFFEE_CONTENT,
            "references": ["National Coffee Association, History of Coffee"],
            "infobox": {"title": "Coffee", "image": 0, "key_facts": {"Type": "Beverage"}},
        },
        FACT_CHECK_KEY: {"verified": True, "score": 88, "analysis": {"unverified_claims": []}},
        HIERARCHICAL_CATEGORIES_KEY: {
            "tags": ["coffee", "caffeine"],
            "categories": {
                "main": ["Beverages"],
                "intermediate": ["Coffee"],
                "specific": ["Coffee preparation"],
                "administrative": [],
            },
        },
    }
    script.update(overrides)
    return script


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def provider_factory():
    """Build a ScriptedProvider from a script dict."""
    return ScriptedProvider


@pytest.fixture
def moderation_factory():
    return FakeModerationClassifier


@pytest.fixture
def user():
    return UserIdentity(uid="user-1", display_name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def session(user):
    return StaticSessionProvider(user)


@pytest.fixture
def anonymous_session():
    return StaticSessionProvider()


@pytest.fixture
def id_factory():
    """Deterministic ids: id-1, id-2, ..."""
    counter = {"n": 0}

    def next_id():
        counter["n"] += 1
        return f"id-{counter['n']}"

    return next_id


@pytest.fixture
def fixed_clock():
    now = datetime(2024, 5, 1, 12, 0, 0)
    return lambda: now


@pytest.fixture
def sample_articles():
    from wikigen.models.article import Article

    return [
        Article(id="a-1", title="Coffee", content="Coffee is a drink."),
        Article(id="a-2", title="Tea", content="Tea is an aromatic beverage."),
    ]


@pytest.fixture
def keys():
    """Prompt keys that route a ScriptedProvider call to a component."""
    from types import SimpleNamespace

    return SimpleNamespace(
        duplicate=DUPLICATE_KEY,
        sources=SOURCES_KEY,
        images=IMAGES_KEY,
        json_article=JSON_ARTICLE_KEY,
        fact_check=FACT_CHECK_KEY,
        prompt_moderation=PROMPT_MODERATION_KEY,
        hierarchical_categories=HIERARCHICAL_CATEGORIES_KEY,
        line_categories=LINE_CATEGORIES_KEY,
        topics=TOPICS_KEY,
        key_facts=KEY_FACTS_KEY,
        retrieval_article=RETRIEVAL_ARTICLE_KEY,
    )


@pytest.fixture
def passing_script():
    """Factory for a completion-variant script where every gate passes."""
    return completion_script
