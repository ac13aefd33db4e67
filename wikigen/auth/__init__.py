"""Authenticated-session access."""

from .session import (
    ANONYMOUS_AUTHOR,
    AuthenticationError,
    SessionProvider,
    StaticSessionProvider,
    UserIdentity,
    require_user,
)

__all__ = [
    "ANONYMOUS_AUTHOR",
    "AuthenticationError",
    "SessionProvider",
    "StaticSessionProvider",
    "UserIdentity",
    "require_user",
]
