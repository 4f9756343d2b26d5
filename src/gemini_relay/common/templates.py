"""Prompt templating helpers."""
from __future__ import annotations
import re
from pathlib import Path
from typing import Mapping

SUMMARY_TEMPLATE = """Generate a comprehensive AI summary for this program:

Program: {{program}}
Institution: {{institution}}
Context: Dashboard trigger at {{timestamp}}

Please provide insights on:
1. Market demand and workforce trends
2. Earnings potential and career outcomes
3. Program viability and recommendations
4. Key strengths and potential concerns

Format the response in a clear, professional manner suitable for institutional decision-making."""

REQUIRED_PLACEHOLDERS = ("{{program}}", "{{institution}}")
_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def load_template(path: str | None = None) -> str:
    """
    Load a prompt template file, or the built-in summary template.

    Args:
        path: Path to template; None returns SUMMARY_TEMPLATE.
    """
    if path is None:
        return SUMMARY_TEMPLATE
    return Path(path).read_text(encoding="utf-8")


def missing_placeholders(template: str) -> list[str]:
    return [p for p in REQUIRED_PLACEHOLDERS if p not in template]


def render_prompt(template: str, values: Mapping[str, str]) -> str:
    """
    Render values into the template in a single pass.

    Inserted values are not scanned again, so text like "{{institution}}"
    inside a value is kept verbatim. Unknown placeholders are left as-is.

    Args:
        template: Template content containing {{name}} placeholders.
        values: Replacement text keyed by placeholder name.

    Returns:
        Rendered prompt.
    """
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), template)
