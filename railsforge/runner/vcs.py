"""Version-control finalization: stage everything and commit."""

from __future__ import annotations

from railsforge.plan.models import CommandInvocation, ErrorKind, StepResult
from railsforge.runner.commands import CommandRunner
from railsforge.utils import command_exists

GIT_ADD = CommandInvocation(
    argv=("git", "add", "."), description="Stage all files", capture_output=True, fatal=False
)


def git_commit(message: str) -> CommandInvocation:
    return CommandInvocation(
        argv=("git", "commit", "-m", message),
        description="Create the initial commit",
        capture_output=True,
        fatal=False,
    )


async def commit_all(runner: CommandRunner, message: str = "Initial commit") -> StepResult:
    """Commit the scaffolded tree.

    Any failure, including a missing git identity, is returned as a
    ``commit_failed`` result rather than raised.
    """
    if not command_exists("git"):
        return StepResult.failure(ErrorKind.COMMIT_FAILED, "git is not installed")

    for invocation in (GIT_ADD, git_commit(message)):
        result = await runner.run(invocation)
        if not result.ok:
            return StepResult.failure(ErrorKind.COMMIT_FAILED, result.message)
    return StepResult.success(f"Committed: {message}")
