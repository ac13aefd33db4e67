"""
Session access for attributing generated articles to an author.
"""

from typing import Optional, Protocol

from pydantic import BaseModel


ANONYMOUS_AUTHOR = "Anonymous"


class AuthenticationError(Exception):
    """Raised when generation is attempted without an authenticated user."""


class UserIdentity(BaseModel):
    uid: str
    display_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def author_name(self) -> str:
        return self.display_name or self.email or ANONYMOUS_AUTHOR


class SessionProvider(Protocol):
    """Returns the currently authenticated user, or None."""

    def current_user(self) -> Optional[UserIdentity]:
        ...


def require_user(session: SessionProvider) -> UserIdentity:
    """Return the current user or raise AuthenticationError."""
    user = session.current_user()
    if user is None:
        raise AuthenticationError("User must be logged in to generate articles")
    return user


class StaticSessionProvider:
    """A fixed identity, for command-line and scripted use."""

    def __init__(self, user: Optional[UserIdentity] = None):
        self.user = user

    def current_user(self) -> Optional[UserIdentity]:
        return self.user
