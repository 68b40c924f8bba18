"""Prompt loading from disk with caching and placeholder rendering.

Prompt templates live as Markdown files in ``skillforged/prompts/``, one
per prompt name (``structure.md``, ``explain.md``). Placeholders use
``string.Template`` syntax (``$title``) so the JSON examples inside the
templates need no brace escaping.

Consumed by:
- architect.generate_structure — the "structure" prompt
- tutor.explain_topic — the "explain" prompt
"""

from __future__ import annotations

import logging
from pathlib import Path
from string import Template

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"


class PromptNotFoundError(LookupError):
    """A prompt file is missing or empty."""


class PromptLoader:
    """Loads and caches prompt templates from disk.

    Args:
        prompts_dir: Directory holding the ``{name}.md`` templates.
    """

    def __init__(self, prompts_dir: Path = PROMPTS_DIR) -> None:
        self._prompts_dir = prompts_dir
        self._cache: dict[str, Template] = {}

    def load(self, name: str) -> Template:
        """Returns the template for a prompt name, reading it once.

        Raises:
            PromptNotFoundError: If the file is absent or whitespace-only.
        """
        if name in self._cache:
            return self._cache[name]

        logger.debug("Cache miss for prompt: %s", name)
        content = self._read_prompt_file(self._prompts_dir / f"{name}.md")
        if content is None:
            raise PromptNotFoundError(f"Missing prompt file prompts/{name}.md")

        template = Template(content)
        self._cache[name] = template
        return template

    def render(self, name: str, /, **fields: object) -> str:
        """Loads a template and substitutes every placeholder.

        Raises:
            PromptNotFoundError: If the template is missing.
            KeyError: If a placeholder has no value in fields.
        """
        return self.load(name).substitute(**fields)

    def invalidate(self) -> None:
        """Clears the in-memory template cache."""
        logger.debug("Prompt cache invalidated (%d entries cleared)", len(self._cache))
        self._cache.clear()

    @staticmethod
    def _read_prompt_file(path: Path) -> str | None:
        """Reads a single prompt file, returning None if absent or empty."""
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        stripped = content.strip()
        if not stripped:
            return None

        return stripped


def _format_hours(hours: float) -> str:
    return str(int(hours)) if float(hours).is_integer() else str(hours)


def build_structure_prompt(
    loader: PromptLoader,
    *,
    title: str,
    target_goal: str,
    skill_level: str,
    weekly_hours: float,
) -> str:
    """Renders the curriculum-structure prompt for one generation input."""
    return loader.render(
        "structure",
        title=title,
        target_goal=target_goal,
        skill_level=skill_level,
        weekly_hours=_format_hours(weekly_hours),
    )


def build_explain_prompt(
    loader: PromptLoader, *, topic: str, context: str, skill_level: str
) -> str:
    """Renders the tutor explanation prompt."""
    return loader.render(
        "explain", topic=topic, context=context, skill_level=skill_level
    )
