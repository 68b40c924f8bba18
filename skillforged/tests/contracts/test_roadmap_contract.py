"""Contract tests for RoadmapStore — behavioral specification.

Verifies that any RoadmapStore implementation satisfies:
- save/get round trip, including the generation input fields
- Per-user isolation (a foreign user_id behaves like a missing roadmap)
- Newest-first listing
- Derived module status and roadmap progress on every write
- Idempotent delete

These tests use only the public interface — no internal state inspection.

Run against registered implementations:
    python -m pytest skillforged/tests/contracts/test_roadmap_contract.py -v
"""

import pytest

from skillforged.hooks.interfaces import RoadmapNotFoundError


class TestRoadmapContract:
    """Behavioral contract for RoadmapStore implementations."""

    # -- save / get --------------------------------------------------------

    @pytest.mark.asyncio
    async def test_save_then_get(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        """A saved roadmap comes back with its curriculum and input fields."""
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        roadmap = await roadmap_store.get_roadmap("u1", roadmap_id)

        assert roadmap is not None
        assert roadmap.id == roadmap_id
        assert roadmap.title == "Contract Curriculum"
        assert roadmap.current_skill_level == "intermediate"
        assert roadmap.weekly_hours == 5
        assert [m.id for m in roadmap.modules] == ["mod-1", "mod-2"]
        assert roadmap.progress == 0
        assert all(m.status == "not_started" for m in roadmap.modules)

    @pytest.mark.asyncio
    async def test_ids_are_unique(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        first = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        second = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        assert first != second

    @pytest.mark.asyncio
    async def test_get_nonexistent_returns_none(self, roadmap_store) -> None:
        assert await roadmap_store.get_roadmap("u1", "missing") is None

    @pytest.mark.asyncio
    async def test_caller_keeps_no_handle_on_stored_document(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        """Mutating the curriculum after save must not change the roadmap."""
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        sample_curriculum.modules[0].topics[0].is_completed = True
        roadmap = await roadmap_store.get_roadmap("u1", roadmap_id)
        assert roadmap.modules[0].topics[0].is_completed is False

    # -- isolation ---------------------------------------------------------

    @pytest.mark.asyncio
    async def test_other_user_sees_nothing(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        """A roadmap saved for u1 must be invisible to u2."""
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        assert await roadmap_store.get_roadmap("u2", roadmap_id) is None
        assert await roadmap_store.list_roadmaps("u2") == []

    @pytest.mark.asyncio
    async def test_other_user_cannot_delete(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        assert await roadmap_store.delete_roadmap("u2", roadmap_id) is False
        assert await roadmap_store.get_roadmap("u1", roadmap_id) is not None

    @pytest.mark.asyncio
    async def test_other_user_cannot_complete_topics(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        with pytest.raises(RoadmapNotFoundError):
            await roadmap_store.update_topic_completion(
                "u2", roadmap_id, "mod-1", "t-1-1", True
            )

    # -- listing -----------------------------------------------------------

    @pytest.mark.asyncio
    async def test_list_newest_first(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        older = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        newer = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        listed = [r.id for r in await roadmap_store.list_roadmaps("u1")]
        assert listed == [newer, older]

    # -- derived progress --------------------------------------------------

    @pytest.mark.asyncio
    async def test_completion_derives_status_and_progress(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        """One of three topics done: 33%, first module in progress."""
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        progress = await roadmap_store.update_topic_completion(
            "u1", roadmap_id, "mod-1", "t-1-1", True
        )
        roadmap = await roadmap_store.get_roadmap("u1", roadmap_id)

        assert progress == 33
        assert roadmap.progress == 33
        assert roadmap.modules[0].status == "in_progress"
        assert roadmap.modules[1].status == "not_started"

    @pytest.mark.asyncio
    async def test_completing_a_module(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        await roadmap_store.update_topic_completion("u1", roadmap_id, "mod-2", "t-2-1", True)
        roadmap = await roadmap_store.get_roadmap("u1", roadmap_id)
        assert roadmap.modules[1].status == "completed"
        assert roadmap.progress == 33

    @pytest.mark.asyncio
    async def test_uncompleting_reverts(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        await roadmap_store.update_topic_completion("u1", roadmap_id, "mod-1", "t-1-1", True)
        progress = await roadmap_store.update_topic_completion(
            "u1", roadmap_id, "mod-1", "t-1-1", False
        )
        roadmap = await roadmap_store.get_roadmap("u1", roadmap_id)
        assert progress == 0
        assert roadmap.modules[0].status == "not_started"

    @pytest.mark.asyncio
    async def test_everything_completed(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        for module_id, topic_id in (("mod-1", "t-1-1"), ("mod-1", "t-1-2"), ("mod-2", "t-2-1")):
            progress = await roadmap_store.update_topic_completion(
                "u1", roadmap_id, module_id, topic_id, True
            )
        assert progress == 100

    @pytest.mark.asyncio
    async def test_unknown_topic_raises(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        """A topic id from the wrong module does not match."""
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        with pytest.raises(RoadmapNotFoundError):
            await roadmap_store.update_topic_completion(
                "u1", roadmap_id, "mod-2", "t-1-1", True
            )

    # -- delete ------------------------------------------------------------

    @pytest.mark.asyncio
    async def test_delete_then_get(
        self, roadmap_store, sample_curriculum, sample_input
    ) -> None:
        roadmap_id = await roadmap_store.save_roadmap("u1", sample_curriculum, sample_input)
        assert await roadmap_store.delete_roadmap("u1", roadmap_id) is True
        assert await roadmap_store.get_roadmap("u1", roadmap_id) is None

    @pytest.mark.asyncio
    async def test_delete_nonexistent(self, roadmap_store) -> None:
        """Deleting a missing roadmap returns False and does not raise."""
        assert await roadmap_store.delete_roadmap("u1", "missing") is False
