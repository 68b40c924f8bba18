"""Core data models — shared Pydantic types for the SkillForged service.

Every generation request, curriculum, job record, and API response flows
through these types. They are the shared vocabulary between the AI router,
the scraper federation, the job worker, and the HTTP layer.

Field names are snake_case in Python and camelCase on the wire
(``weeklyHours``, ``roadmapId``, ...). Models accept either form on input;
boundaries serialize with ``by_alias=True``.

This is a Tier 1 leaf module: it imports only from pydantic and the stdlib.
No project imports allowed — everything else imports from here.

Usage:
    from skillforged.schemas import GenerationInput, Curriculum, Job
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SkillLevel = Literal["beginner", "intermediate", "advanced"]
ResourceType = Literal["video", "article", "documentation", "exercise", "project"]
ModuleStatus = Literal["not_started", "in_progress", "completed"]
JobStatus = Literal[
    "starting",
    "analyzing",
    "generating",
    "structuring",
    "saving",
    "completed",
    "failed",
]

TERMINAL_JOB_STATUSES: frozenset[str] = frozenset({"completed", "failed"})


class _CamelModel(BaseModel):
    """Base for wire types: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class User(BaseModel):
    """Identity model returned by the auth layer.

    Frozen — users are identity objects, no mutation after creation.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str | None = None


# ---------------------------------------------------------------------------
# Generation input
# ---------------------------------------------------------------------------


class GenerationInput(_CamelModel):
    """What the learner asked for. Immutable once submitted."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    title: str = Field(min_length=3, max_length=100)
    current_skill_level: SkillLevel
    target_goal: str = Field(min_length=10, max_length=500)
    weekly_hours: float = Field(ge=1, le=60)


# ---------------------------------------------------------------------------
# Curriculum
# ---------------------------------------------------------------------------


class Resource(_CamelModel):
    """One external learning asset attached to a topic.

    ``type`` is a free string on input — AI output and scraper drift both
    produce off-vocabulary values. It is folded into ResourceType by
    normalize_resource_type() before the curriculum is persisted.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    title: str
    url: str
    type: str = "article"
    source: str = ""
    thumbnail: str | None = None


class RelatedLink(_CamelModel):
    """Curated community/tool/reference link attached to a module."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    title: str
    url: str
    category: str


class Topic(_CamelModel):
    """One learning item within a module.

    Created by structure generation with no resources; the worker attaches
    resources during enrichment. ``is_completed`` belongs to the learner.
    """

    id: str
    title: str
    description: str = ""
    resources: list[Resource] = Field(default_factory=list)
    estimated_hours: float | None = None
    is_completed: bool = False


class Module(_CamelModel):
    """One week-sized unit of a curriculum.

    ``status`` is derived by the roadmap store from topic completion; the
    pipeline only ever produces modules in the not_started shape.
    """

    id: str
    week: int
    title: str
    description: str = ""
    topics: list[Topic] = Field(default_factory=list)
    status: ModuleStatus = "not_started"
    related_links: list[RelatedLink] = Field(default_factory=list)


class Curriculum(_CamelModel):
    """A generated learning roadmap, owned by the worker until persisted."""

    title: str
    description: str = ""
    total_weeks: int
    total_hours: float
    modules: list[Module] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    learning_outcomes: list[str] = Field(default_factory=list)


class Roadmap(Curriculum):
    """A persisted curriculum document, as returned by the roadmap store."""

    id: str
    user_id: str
    current_skill_level: SkillLevel
    target_goal: str
    weekly_hours: float
    progress: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ---------------------------------------------------------------------------
# Resource type normalization
# ---------------------------------------------------------------------------

RESOURCE_TYPES: frozenset[str] = frozenset(
    {"video", "article", "documentation", "exercise", "project"}
)

# Off-vocabulary type → nearest valid type. Data, not behaviour.
RESOURCE_TYPE_ALIASES: dict[str, ResourceType] = {
    "tutorial": "video",
    "course": "video",
    "guide": "article",
    "example": "article",
    "sample": "article",
    "source": "article",
    "document": "documentation",
    "doc": "documentation",
    "docs": "documentation",
    "reference": "documentation",
    "test": "exercise",
    "quiz": "exercise",
    "practice": "exercise",
    "repo": "project",
    "repository": "project",
    "github": "project",
    "code": "project",
}


def normalize_resource_type(value: str | None) -> ResourceType:
    """Folds any type string into ResourceType. Unmapped values → "article"."""
    normalized = str(value or "").strip().lower()
    if normalized in RESOURCE_TYPES:
        return normalized  # type: ignore[return-value]
    return RESOURCE_TYPE_ALIASES.get(normalized, "article")


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class Job(_CamelModel):
    """Status record for one generation run, polled by the client.

    Written only by the worker that owns the job. Terminal states carry
    ``roadmap_id`` (completed) or ``error`` (failed).
    """

    id: str
    status: JobStatus
    progress: int = Field(default=0, ge=0, le=100)
    message: str = ""
    logs: list[str] = Field(default_factory=list)
    roadmap_id: str | None = None
    error: str | None = None


class SubmitResult(_CamelModel):
    """Outcome of a generation submission."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    success: bool
    job_id: str | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# AI
# ---------------------------------------------------------------------------


class AIResponse(_CamelModel):
    """Result of one routed AI call. Never mutated after return."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    success: bool
    text: str | None = None
    error: str | None = None
    provider: str | None = None
    model_id: str | None = None
    response_time_ms: float | None = None
    from_cache: bool = False


class RateLimitResult(_CamelModel):
    """Outcome of a rate-limit check."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    allowed: bool
    remaining: int
    reset_in: int


# ---------------------------------------------------------------------------
# API envelope
# ---------------------------------------------------------------------------


class ApiError(BaseModel):
    """Error detail inside ApiResponse.error.

    code is an uppercase string like "JOB_NOT_FOUND", "RATE_LIMITED".
    Not an enum — error codes grow with the API.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class ApiResponse(BaseModel):
    """Universal response envelope — every API endpoint returns this shape."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    data: Any | None = None
    error: ApiError | None = None
