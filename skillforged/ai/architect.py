"""Curriculum architect — AI structure generation with a template fallback.

generate_structure() asks the router (task type "structure") for a
curriculum shell: modules and topics, no resources. Whatever comes back
is coerced into a well-formed Curriculum — ids and week numbers filled
in, topics without titles dropped, modules without topics dropped.

If routing fails, the JSON cannot be repaired, or the shell has no
usable modules, the architect falls back to fallback_structure(): a
deterministic template built from the input alone. The structure stage
never fails a job.

Tier 2 service — imports from ai.router, ai.json_repair, ai.prompts.
"""

import logging
import math
from typing import Any

from pydantic import ValidationError

from skillforged.ai.json_repair import AIParseError, parse_ai_json
from skillforged.ai.prompts import PromptLoader, build_structure_prompt
from skillforged.ai.router import AIRoutingError, ModelRouter
from skillforged.schemas import Curriculum, GenerationInput, Module, Topic

logger = logging.getLogger(__name__)

_MODULE_TEMPLATES = (
    ("Fundamentals & Setup", "Core concepts and environment setup"),
    ("Core Concepts", "Essential knowledge and best practices"),
    ("Practical Application", "Real-world projects and exercises"),
    ("Advanced Topics", "Advanced patterns and optimization"),
    ("Professional Practice", "Professional tools and workflows"),
)

_FALLBACK_PREREQUISITES = ["Basic programming knowledge", "Problem-solving skills"]


def fallback_structure(generation_input: GenerationInput) -> Curriculum:
    """Builds a plausible curriculum skeleton from the input parameters.

    Module count is max(3, ceil(total_weeks / weeks_per_module)), capped
    by the five templates. total_weeks never drops below 4.
    """
    hours = generation_input.weekly_hours
    weeks_per_module = max(1, math.ceil(hours / 2))
    total_weeks = max(4, math.ceil(52 * (hours / 10)))
    module_count = min(
        max(3, math.ceil(total_weeks / weeks_per_module)), len(_MODULE_TEMPLATES)
    )
    subject = generation_input.title.lower()

    modules = []
    for index, (title, description) in enumerate(_MODULE_TEMPLATES[:module_count]):
        modules.append(
            Module(
                id=f"mod-{index + 1}",
                week=index + 1,
                title=title,
                description=description,
                topics=[
                    Topic(
                        id=f"t-{index}-1",
                        title=f"Introduction to {title}",
                        description=f"Learn the fundamentals of {title.lower()}",
                    ),
                    Topic(
                        id=f"t-{index}-2",
                        title=f"{title} in Practice",
                        description=f"Apply {title.lower()} to real scenarios",
                    ),
                    Topic(
                        id=f"t-{index}-3",
                        title="Best Practices and Patterns",
                        description=f"Industry standards for {subject}",
                    ),
                ],
            )
        )

    return Curriculum(
        title=generation_input.title,
        description=(
            f"A comprehensive {generation_input.current_skill_level}-level "
            f"learning path for {generation_input.title}"
        ),
        total_weeks=total_weeks,
        total_hours=total_weeks * hours,
        modules=modules,
        prerequisites=list(_FALLBACK_PREREQUISITES),
        learning_outcomes=[
            f"Master fundamental concepts of {generation_input.title}",
            "Apply practical techniques in real projects",
            "Understand best practices and industry standards",
            "Build professional-level skills",
        ],
    )


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    # NaN and infinities cannot become week or hour counts.
    return number if math.isfinite(number) else None


def _as_strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def coerce_curriculum(data: Any, generation_input: GenerationInput) -> Curriculum:
    """Turns a parsed AI shell into a Curriculum with empty-resource topics.

    Raises:
        AIParseError: If the shell has no module with at least one titled topic.
    """
    if isinstance(data, list):
        data = {"modules": data}
    if not isinstance(data, dict):
        raise AIParseError("Curriculum shell is not a JSON object")

    modules: list[Module] = []
    seen_module_ids: set[str] = set()
    for raw_module in data.get("modules") or []:
        if not isinstance(raw_module, dict):
            continue
        module_index = len(modules)

        topics: list[Topic] = []
        seen_topic_ids: set[str] = set()
        for raw_topic in raw_module.get("topics") or []:
            if not isinstance(raw_topic, dict) or not _as_text(raw_topic.get("title")):
                continue
            topic_id = str(raw_topic.get("id") or "").strip()
            if not topic_id or topic_id in seen_topic_ids:
                topic_id = f"t-{module_index}-{len(topics) + 1}"
            seen_topic_ids.add(topic_id)
            topics.append(
                Topic(
                    id=topic_id,
                    title=_as_text(raw_topic["title"]),
                    description=_as_text(raw_topic.get("description")),
                    estimated_hours=_as_number(raw_topic.get("estimatedHours")),
                )
            )
        if not topics:
            continue

        module_id = str(raw_module.get("id") or "").strip()
        if not module_id or module_id in seen_module_ids:
            module_id = f"mod-{module_index + 1}"
        seen_module_ids.add(module_id)

        week = _as_number(raw_module.get("week"))
        modules.append(
            Module(
                id=module_id,
                week=int(week) if week and week > 0 else module_index + 1,
                title=_as_text(raw_module.get("title")) or f"Module {module_index + 1}",
                description=_as_text(raw_module.get("description")),
                topics=topics,
            )
        )

    if not modules:
        raise AIParseError("Curriculum shell has no usable modules")

    total_weeks = _as_number(data.get("totalWeeks"))
    total_weeks_int = max(int(total_weeks or 0), len(modules))
    total_hours = _as_number(data.get("totalHours"))
    if not total_hours or total_hours <= 0:
        total_hours = total_weeks_int * generation_input.weekly_hours

    return Curriculum(
        title=_as_text(data.get("title")) or generation_input.title,
        description=_as_text(data.get("description")),
        total_weeks=total_weeks_int,
        total_hours=total_hours,
        modules=modules,
        prerequisites=_as_strings(data.get("prerequisites")),
        learning_outcomes=_as_strings(data.get("learningOutcomes")),
    )


async def generate_structure(
    router: ModelRouter,
    loader: PromptLoader,
    generation_input: GenerationInput,
) -> Curriculum:
    """Returns an AI-designed curriculum shell, or the template fallback.

    Args:
        router: Model router used with task type "structure".
        loader: Prompt loader holding the structure template.
        generation_input: What the learner asked for.

    Returns:
        A Curriculum whose topics carry no resources yet.
    """
    prompt = build_structure_prompt(
        loader,
        title=generation_input.title,
        target_goal=generation_input.target_goal,
        skill_level=generation_input.current_skill_level,
        weekly_hours=generation_input.weekly_hours,
    )

    try:
        response = await router.route(prompt, "structure")
        if not response.success or not response.text:
            raise AIRoutingError(response)
        curriculum = coerce_curriculum(parse_ai_json(response.text), generation_input)
    except AIRoutingError as exc:
        logger.warning("AI structure generation failed, using fallback: %s", exc)
        return fallback_structure(generation_input)
    except (AIParseError, ValidationError) as exc:
        logger.warning("AI structure unusable, using fallback: %s", exc)
        return fallback_structure(generation_input)

    logger.info(
        "Structure generated using %s/%s (%d modules)",
        response.provider,
        response.model_id,
        len(curriculum.modules),
    )
    return curriculum
