"""Summary Reporter: status lines per selected flag plus next steps."""

from __future__ import annotations

from railsforge.plan.flags import FLAG_ACTIONS
from railsforge.plan.models import ActionKind, ErrorKind, StepResult
from railsforge.plan.options import OptionSet
from railsforge.template.renderer import TextRenderer
from railsforge.utils import console, print_success, print_warning

NEXT_STEPS_TEMPLATE = """\
  To get started with your new app:
  cd {{ app_name }}

  # Please update config/database.yml with your database credentials
{% if containers %}
  # Services run with: docker compose --profile essential up -d
{% endif %}

  bin/dev    (or: rails s)
"""


def summary_lines(options: OptionSet, containers: bool = True) -> list[str]:
    """Return one status line per applied flag, in invocation order.

    Only the active container flag gets a line, and none when *containers*
    is ``False`` because the stack was never set up.
    """
    lines: list[str] = []
    for flag in options:
        action = FLAG_ACTIONS[flag]
        if action.kind is ActionKind.CONTAINER:
            if not containers or flag != options.container_flag:
                continue
        if action.summary:
            lines.append(action.summary)
    return lines


def render_next_steps(app_name: str, containers: bool = False, renderer: TextRenderer | None = None) -> str:
    renderer = renderer or TextRenderer()
    return renderer.render_string(
        NEXT_STEPS_TEMPLATE, {"app_name": app_name, "containers": containers}
    )


def print_summary(
    options: OptionSet,
    app_name: str,
    warnings: list[StepResult] | None = None,
) -> None:
    """Print the run summary. Has no effect on the generated project."""
    engine_missing = any(w.kind is ErrorKind.ENGINE_MISSING for w in warnings or [])
    containers = options.container_flag is not None and not engine_missing

    console.print()
    for line in summary_lines(options, containers=not engine_missing):
        print_success(line)

    if warnings:
        console.print()
        print_warning(f"Completed with {len(warnings)} warning(s):")
        for result in warnings:
            print_warning(f"  - {result.message}")

    console.print()
    next_steps = render_next_steps(app_name, containers=containers)
    lines = next_steps.splitlines()
    console.print(f"[yellow]{lines[0]}[/yellow]")
    for line in lines[1:]:
        console.print(line, markup=False, highlight=False)
