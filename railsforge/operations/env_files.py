"""Idempotent seeding of the application's environment files."""

from __future__ import annotations

from railsforge.operations.engine import FileOperationEngine
from railsforge.plan.models import ErrorKind, StepResult
from railsforge.plan.steps import DIRENV_ALLOW, env_file_operations
from railsforge.runner.commands import CommandRunner
from railsforge.utils import command_exists


async def seed_env_files(engine: FileOperationEngine, runner: CommandRunner) -> list[StepResult]:
    """Copy ``.env.*`` and ``.envrc`` on the first run only.

    An existing ``.env.development`` means the files were seeded before and
    may carry user edits, so nothing is touched.
    """
    if (engine.target_root / ".env.development").exists():
        return [StepResult.noop(ErrorKind.SKIPPED_EXISTING, "Environment files already present")]

    results = engine.apply_all(env_file_operations())
    if command_exists("direnv"):
        results.append(await runner.run(DIRENV_ALLOW))
    else:
        results.append(
            StepResult.failure(
                ErrorKind.COMMAND_FAILED, "direnv is not installed; run `direnv allow` later"
            )
        )
    return results
