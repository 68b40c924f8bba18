"""Hook interfaces — abstract base classes for all swappable services.

These ABCs define the contracts between the generation pipeline and the
infrastructure layer. Each one has a development stub that lets the
service run end-to-end without real infrastructure, and (where it earns
its keep) a production implementation.

Tier 1 leaf module: imports only from abc, typing (stdlib) and
skillforged.schemas (also Tier 1). No project services, no orchestration.

TEAM: To implement a real service, subclass the relevant ABC and implement
every abstract method. Python will raise TypeError at instantiation if
any method is missing — you'll know immediately what's left to do.

Usage:
    from skillforged.hooks.interfaces import AuthService, CacheStore
    from skillforged.hooks.interfaces import RoadmapStore, RateLimiter
"""

from abc import ABC, abstractmethod
from typing import Any

from skillforged.schemas import (
    Curriculum,
    GenerationInput,
    RateLimitResult,
    Roadmap,
    User,
)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AuthService(ABC):
    """Validates auth tokens and resolves users.

    The auth provider (OAuth, credentials, JWT — team's choice) lives
    behind this interface. The pipeline only needs a stable user id.
    """

    @abstractmethod
    async def validate_token(self, token: str) -> User | None:
        """Validates an auth token and returns the associated user.

        Args:
            token: Bearer token from the request.

        Returns:
            The User if the token is valid and not expired, None otherwise.
        """
        ...


# ---------------------------------------------------------------------------
# Cache (shared across process instances)
# ---------------------------------------------------------------------------


class CacheStore(ABC):
    """Key/value store with expiring keys and atomic counters.

    The only state shared between the process that accepts a submission
    and the process that answers a later poll. Backs AI response caching,
    resource caching, rate-limit counters, and job status.

    Values are JSON-compatible (dicts, lists, strings, numbers). Reads and
    writes are last-writer-wins; callers that need single ownership
    (job records) get it from their own key discipline.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Returns the stored value, or None if missing or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Stores a value that expires after ttl_seconds."""
        ...

    @abstractmethod
    async def increment(self, key: str, ttl_seconds: int) -> int:
        """Atomically increments a counter and returns the new value.

        The TTL is applied when the counter is created (first increment)
        and is not extended by later increments.
        """
        ...

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Seconds until the key expires; -2 if missing, -1 if no expiry."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Removes a key. No-op if missing."""
        ...


# ---------------------------------------------------------------------------
# Roadmap persistence
# ---------------------------------------------------------------------------


class RoadmapError(Exception):
    """Base class for roadmap store errors."""


class RoadmapNotFoundError(RoadmapError):
    """The roadmap (or topic) does not exist for this user."""


class RoadmapStore(ABC):
    """Durable storage for finished curricula.

    save_roadmap is the pipeline's only durability boundary — nothing
    before it survives a crash. Every read and write is scoped by user_id;
    a user_id mismatch behaves exactly like a missing document.

    Module status and roadmap progress are derived here, on every write,
    from topic completion. Callers never set them.
    """

    @abstractmethod
    async def save_roadmap(
        self,
        user_id: str,
        curriculum: Curriculum,
        generation_input: GenerationInput,
    ) -> str:
        """Persists a finished curriculum and returns its generated id."""
        ...

    @abstractmethod
    async def list_roadmaps(self, user_id: str) -> list[Roadmap]:
        """Returns the user's roadmaps, newest first."""
        ...

    @abstractmethod
    async def get_roadmap(self, user_id: str, roadmap_id: str) -> Roadmap | None:
        """Returns one roadmap, or None if missing or owned by someone else."""
        ...

    @abstractmethod
    async def update_topic_completion(
        self,
        user_id: str,
        roadmap_id: str,
        module_id: str,
        topic_id: str,
        is_completed: bool,
    ) -> int:
        """Marks a topic (in)complete and returns the new roadmap progress.

        Raises:
            RoadmapNotFoundError: If the roadmap or topic does not exist.
        """
        ...

    @abstractmethod
    async def delete_roadmap(self, user_id: str, roadmap_id: str) -> bool:
        """Deletes a roadmap. Returns False if it did not exist."""
        ...


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------


class RateLimiter(ABC):
    """Fixed-window rate limiting for AI-facing entry points.

    The identifier is a free string — client IP for anonymous limits,
    user id for per-account limits.
    """

    @abstractmethod
    async def check(
        self, identifier: str, max_requests: int, window_seconds: int
    ) -> RateLimitResult:
        """Counts one request against the identifier's current window.

        Args:
            identifier: Who is being limited.
            max_requests: Requests allowed per window.
            window_seconds: Window length, starting at the first request.

        Returns:
            Whether this request is allowed, how many remain, and how many
            seconds until the window resets.
        """
        ...
