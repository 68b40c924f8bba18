"""In-memory roadmap store — development stub for RoadmapStore.

Python dict-backed storage for finished curricula. Data lives only in
memory and is lost on restart. Ownership is enforced by checking user_id
on every access — a query with the wrong user_id behaves as "not found",
never returning another learner's roadmap.

Module status and roadmap progress are recomputed on every write, the
same way a document-store pre-save hook would do it.

TEAM: Replace this with your real document store. Subclass RoadmapStore
from skillforged.hooks.interfaces and implement all five abstract methods.
Your implementation must derive status/progress the same way (see
_derive_progress below).

Usage:
    from skillforged.hooks.database import InMemoryRoadmapStore

    store = InMemoryRoadmapStore()
    roadmap_id = await store.save_roadmap("u1", curriculum, generation_input)
"""

from datetime import datetime, timezone
from uuid import uuid4

from skillforged.hooks.interfaces import RoadmapNotFoundError, RoadmapStore
from skillforged.schemas import Curriculum, GenerationInput, Roadmap


def _derive_progress(roadmap: Roadmap) -> None:
    """Recomputes every module's status and the roadmap's progress in place."""
    total_topics = 0
    completed_topics = 0

    for module in roadmap.modules:
        module_total = len(module.topics)
        module_done = sum(1 for topic in module.topics if topic.is_completed)
        total_topics += module_total
        completed_topics += module_done

        if module_done == 0:
            module.status = "not_started"
        elif module_done == module_total:
            module.status = "completed"
        else:
            module.status = "in_progress"

    roadmap.progress = (
        round(completed_topics / total_topics * 100) if total_topics else 0
    )


class InMemoryRoadmapStore(RoadmapStore):
    """STUB — dict-backed storage, loses data on restart.

    Roadmaps are keyed by id; each carries its owner's user_id.
    """

    def __init__(self) -> None:
        """Initialises an empty store."""
        self._roadmaps: dict[str, Roadmap] = {}

    async def save_roadmap(
        self,
        user_id: str,
        curriculum: Curriculum,
        generation_input: GenerationInput,
    ) -> str:
        """Stores a new roadmap built from a finished curriculum.

        The curriculum is deep-copied; the caller keeps no handle on the
        stored document.

        Returns:
            The generated roadmap id.
        """
        roadmap_id = uuid4().hex
        roadmap = Roadmap(
            id=roadmap_id,
            user_id=user_id,
            current_skill_level=generation_input.current_skill_level,
            target_goal=generation_input.target_goal,
            weekly_hours=generation_input.weekly_hours,
            **curriculum.model_copy(deep=True).model_dump(),
        )
        _derive_progress(roadmap)
        self._roadmaps[roadmap_id] = roadmap
        return roadmap_id

    async def list_roadmaps(self, user_id: str) -> list[Roadmap]:
        """Returns the user's roadmaps, newest first."""
        # Reversed insertion order breaks created_at ties newest-first.
        owned = [r for r in reversed(self._roadmaps.values()) if r.user_id == user_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)

    async def get_roadmap(self, user_id: str, roadmap_id: str) -> Roadmap | None:
        """Returns the roadmap if it exists and belongs to user_id."""
        roadmap = self._roadmaps.get(roadmap_id)
        if roadmap is None or roadmap.user_id != user_id:
            return None
        return roadmap

    async def update_topic_completion(
        self,
        user_id: str,
        roadmap_id: str,
        module_id: str,
        topic_id: str,
        is_completed: bool,
    ) -> int:
        """Flips one topic's completion flag and re-derives progress.

        Raises:
            RoadmapNotFoundError: If the roadmap or the topic is missing.
        """
        roadmap = await self.get_roadmap(user_id, roadmap_id)
        if roadmap is None:
            raise RoadmapNotFoundError(f"Roadmap {roadmap_id} not found")

        found = False
        for module in roadmap.modules:
            if module.id != module_id:
                continue
            for topic in module.topics:
                if topic.id == topic_id:
                    topic.is_completed = is_completed
                    found = True

        if not found:
            raise RoadmapNotFoundError(
                f"Topic {topic_id} not found in module {module_id}"
            )

        _derive_progress(roadmap)
        roadmap.updated_at = datetime.now(timezone.utc)
        return roadmap.progress

    async def delete_roadmap(self, user_id: str, roadmap_id: str) -> bool:
        """Deletes the roadmap if it belongs to user_id."""
        if await self.get_roadmap(user_id, roadmap_id) is None:
            return False
        del self._roadmaps[roadmap_id]
        return True
