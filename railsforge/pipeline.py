"""railsforge Pipeline Orchestrator.

Turns a freshly generated Rails application into a Rails 7 + ViteJS +
Tailwind CSS skeleton in seven strictly sequential phases:

Phase 1: DEPENDENCIES -- Add gems and run ``bundle install``.
Phase 2: SOURCE       -- Resolve the template assets (local path or git clone).
Phase 3: FRAMEWORK    -- Application name, Vite config, Pages controller, root route.
Phase 4: VARIANTS     -- Selected frontend variant, addons and container stack.
Phase 5: TEMPLATES    -- Shared config files, env files, generator templates, Vite.
Phase 6: DATABASE     -- Database config, Devise, Active Storage, migrations.
Phase 7: FINALIZE     -- Initial git commit.

Usage::

    railsforge ./my_app --vue --docker-essential
    python -m railsforge.pipeline ./my_app --react --hotwired --source ../template
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from railsforge.config import Config
from railsforge.operations.engine import FileOperationEngine
from railsforge.operations.env_files import seed_env_files
from railsforge.plan import steps
from railsforge.plan.flags import YARN_V4_SETUP
from railsforge.plan.models import FileOperation, StepResult
from railsforge.plan.options import (
    FLAGS_DEST,
    OptionSet,
    add_flag_arguments,
    build_action_plan,
)
from railsforge.reporter.summary import print_summary
from railsforge.runner.commands import CommandError, CommandRunner
from railsforge.runner.containers import ContainerStack
from railsforge.runner.vcs import commit_all
from railsforge.template.resolver import SourceError, TemplateSource, resolve_source
from railsforge.utils import (
    PHASE_NAMES,
    format_duration,
    print_banner,
    print_error,
    print_info,
    print_phase_header,
    print_success,
    print_warning,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Raised when a phase fails in a way that makes the scaffold unusable."""

    def __init__(self, phase: int, message: str) -> None:
        self.phase = phase
        super().__init__(f"Phase {phase} ({PHASE_NAMES.get(phase, '?')}): {message}")


# ---------------------------------------------------------------------------
# Run context
# ---------------------------------------------------------------------------


@dataclass
class RunContext:
    """Everything a run needs, passed explicitly instead of ambient process state."""

    target_dir: Path
    options: OptionSet
    config: Config
    source: TemplateSource | None = None

    @property
    def app_name(self) -> str:
        return self.config.app_name or self.target_dir.resolve().name


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives the seven scaffolding phases.

    Fatal failures (``CommandError``, ``SourceError``) become a
    ``ScaffoldError`` that stops the run at once. Every other failure is a
    :class:`StepResult` that is reported as a warning and collected for the
    final summary.

    Attributes:
        context: The run context.
        plan: Flag-driven actions resolved from ``context.options``.
        runner: Command runner bound to the application directory.
        warnings: Failed step results collected so far.
        state: Phase bookkeeping returned from :meth:`run`.
    """

    def __init__(self, context: RunContext, runner: CommandRunner | None = None) -> None:
        self.context = context
        self.plan = build_action_plan(context.options)
        self.runner = runner or CommandRunner(
            context.target_dir, timeout=context.config.command_timeout
        )
        self.engine: FileOperationEngine | None = None
        self.warnings: list[StepResult] = []
        self.state: dict[str, Any] = {
            "phases_completed": [],
            "phases_failed": [],
            "success": False,
        }

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute every phase in order.

        Returns:
            The state dictionary, including a top-level ``success`` boolean
            that is ``False`` only when a fatal error stopped the run.
        """
        started = time.monotonic()
        ctx = self.context
        print_banner(
            "railsforge",
            f"[bold bright_cyan]Rails 7 + ViteJS + Tailwindcss[/bold bright_cyan]\n"
            f"App     : {ctx.target_dir.resolve()}\n"
            f"Source  : {ctx.config.template_source}\n"
            f"Options : {', '.join(ctx.options) or '(none)'}",
        )

        try:
            await self._phase(1, self.phase1_dependencies)

            print_phase_header(2, PHASE_NAMES[2])
            try:
                async with resolve_source(ctx.config.template_source) as source:
                    self._source_ready(source)
                    await self._phase(3, self.phase3_framework)
                    await self._phase(4, self.phase4_variants)
                    await self._phase(5, self.phase5_templates)
                    await self._phase(6, self.phase6_database)
            except SourceError as exc:
                self.state["phases_failed"].append(2)
                raise ScaffoldError(2, str(exc)) from exc

            await self._phase(7, self.phase7_finalize)
        except ScaffoldError as exc:
            print_error(f"Scaffolding aborted: {exc}")
            return self.state

        self.state["success"] = True
        self.state["warnings"] = len(self.warnings)
        self.state["total_duration"] = format_duration(time.monotonic() - started)
        print_summary(ctx.options, ctx.app_name, self.warnings)
        return self.state

    async def _phase(self, number: int, method: Callable[[], Awaitable[None]]) -> None:
        name = PHASE_NAMES[number]
        print_phase_header(number, name)
        phase_start = time.monotonic()
        try:
            await method()
        except CommandError as exc:
            self.state["phases_failed"].append(number)
            raise ScaffoldError(number, str(exc)) from exc
        self.state["phases_completed"].append(number)
        print_success(
            f"Phase {number} ({name}) completed in "
            f"{format_duration(time.monotonic() - phase_start)}"
        )

    def _source_ready(self, source: TemplateSource) -> None:
        self.context.source = source
        self.engine = FileOperationEngine(source.root_path, self.context.target_dir)
        self.state["phases_completed"].append(2)
        label = source.url or str(source.root_path)
        if source.branch:
            label += f" ({source.branch})"
        print_success(f"Phase 2 (SOURCE) using {source.kind.value} templates from {label}")

    # ------------------------------------------------------------------
    # Result handling
    # ------------------------------------------------------------------

    def _report(self, results: Iterable[StepResult]) -> None:
        for result in results:
            if not result.ok:
                print_warning(f"  {result.message}")
                self.warnings.append(result)

    async def _apply(self, operations: Iterable[FileOperation]) -> None:
        assert self.engine is not None  # set once the source is resolved
        results = await asyncio.to_thread(self.engine.apply_all, list(operations))
        self._report(results)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def phase1_dependencies(self) -> None:
        declared = steps.declared_gems(self.context.target_dir / "Gemfile")
        await self.runner.run_all(steps.dependency_commands(self.plan.gems, declared))

    async def phase3_framework(self) -> None:
        await self._apply(steps.FRAMEWORK_OPERATIONS)
        print_info("  You can change application name inside: ./config/application.rb")
        await self.runner.run(steps.PAGES_CONTROLLER)
        await self._apply(steps.POST_CONTROLLER_OPERATIONS)

    async def phase4_variants(self) -> None:
        for action in self.plan.actions:
            print_info(f"  Applying {action.flag}")
            await self._apply(action.operations)
            self._report(await self.runner.run_all(action.commands))

        if self.plan.container is not None:
            assert self.engine is not None
            stack = ContainerStack(self.engine, self.runner, self.context.config)
            self._report(await stack.setup(self.plan.container))

    async def phase5_templates(self) -> None:
        assert self.engine is not None
        await self._apply(steps.TEMPLATE_OPERATIONS)
        self._report(await seed_env_files(self.engine, self.runner))
        await self._apply(steps.TEMPLATE_TREE_OPERATIONS)
        print_success("  Custom scaffold templates copied")
        await self.runner.run_all(YARN_V4_SETUP)
        await self.runner.run(steps.VITE_INSTALL)

    async def phase6_database(self) -> None:
        await self._apply(steps.DATABASE_CONFIG_OPERATIONS)
        self._report([await self.runner.run(steps.DB_SETUP)])
        await self.runner.run_all(steps.AUTH_COMMANDS)
        await self._apply(steps.AUTH_OPERATIONS)
        await self.runner.run_all(steps.STORAGE_COMMANDS)
        await self._apply(steps.STORAGE_OPERATIONS)
        self._report([await self.runner.run(steps.DB_MIGRATE)])

    async def phase7_finalize(self) -> None:
        self._report([await commit_all(self.runner)])


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="railsforge",
        description="Configure a new Rails app with ViteJS, Tailwind CSS and Devise",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog=(
            "Examples:\n"
            "  railsforge ./my_app --normal\n"
            "  railsforge ./my_app --vue --docker-essential\n"
            "  railsforge ./my_app --react --hotwired --source ../template\n"
        ),
    )
    parser.add_argument(
        "app_path",
        nargs="?",
        default=".",
        help="Directory of the generated Rails application (default: .)",
    )
    parser.add_argument(
        "--source",
        default=None,
        help="Template source: local path or git repository URL",
    )
    parser.add_argument(
        "--app-name",
        default=None,
        help="Application name shown in the next steps (default: directory name)",
    )
    add_flag_arguments(parser)
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``railsforge`` and ``python -m railsforge.pipeline``."""
    parser = build_parser()
    args, _unknown = parser.parse_known_args(argv)

    target = Path(args.app_path)
    if not target.is_dir():
        print_error(f"Error: application directory not found: {target}")
        sys.exit(1)

    try:
        config = Config.from_env()
    except ValueError as exc:
        print_error(f"Error: invalid configuration in environment: {exc}")
        sys.exit(1)
    if args.source:
        config.template_source = args.source
    if args.app_name:
        config.app_name = args.app_name

    context = RunContext(
        target_dir=target,
        options=OptionSet.from_flags(getattr(args, FLAGS_DEST) or []),
        config=config,
    )

    try:
        result = asyncio.run(Pipeline(context).run())
    except KeyboardInterrupt:
        print_error("Interrupted.")
        sys.exit(130)

    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
