"""Jinja2 rendering for parameterised text.

Console guidance that depends on the run (application name, selected
services) is rendered here from inline template strings.
"""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, StrictUndefined, select_autoescape


class TextRenderer:
    """Renders inline Jinja2 template strings with a context dictionary."""

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render *template_string*; unknown variables raise ``UndefinedError``."""
        template = self.env.from_string(template_string)
        return template.render(**context)
