"""Prompt templates for topic research and platform posts."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

# Missing variables fail loudly instead of rendering as empty strings
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)


def render(template_name: str, **context: object) -> str:
    """Render a prompt template with the given context variables."""
    return _env.get_template(template_name).render(**context)


def research_prompt() -> str:
    return render("topic_research.j2")


def post_prompt(
    *,
    platform_name: str,
    topic: str,
    guidelines: list[str],
    research: str,
    wants_hashtags: bool,
) -> str:
    """System prompt asking for one post as a JSON object."""
    return render(
        "platform_post.j2",
        platform_name=platform_name,
        topic=topic,
        guidelines=guidelines,
        research=research or "(no research available)",
        wants_hashtags=wants_hashtags,
    )
