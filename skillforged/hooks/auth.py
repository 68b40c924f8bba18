"""Fake auth service — development stub for AuthService.

Accepts any non-empty token and returns a test user whose id is derived
from the token, so two tokens act as two distinct users. Empty tokens
return None (simulates a missing/invalid Authorization header).

TEAM: Replace this with your real auth provider (OAuth, credentials, etc.).
Subclass AuthService from skillforged.hooks.interfaces and implement
validate_token. The pipeline never touches tokens directly — it gets a
User back from your implementation.

Usage:
    from skillforged.hooks.auth import FakeAuthService

    auth = FakeAuthService()
    user = await auth.validate_token("u1")   # User(id="u1", ...)
"""

from skillforged.hooks.interfaces import AuthService
from skillforged.schemas import User


class FakeAuthService(AuthService):
    """STUB — returns a test user for any non-empty token.

    Does not perform real authentication. The token string itself becomes
    the user id.
    """

    async def validate_token(self, token: str) -> User | None:
        """Returns a test user for any non-empty token.

        Args:
            token: Any string. Non-empty → valid user, empty → None.

        Returns:
            A User whose id is the token, or None if token is empty.
        """
        if not token:
            return None
        return User(id=token, name="Test Learner")
