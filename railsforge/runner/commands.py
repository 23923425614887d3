"""External Command Runner.

Runs package-manager, framework generator and shell commands inside the
application directory. Fatal invocations raise :class:`CommandError` on a
non-zero exit; non-fatal ones return a failed :class:`StepResult`.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from railsforge.plan.models import CommandInvocation, ErrorKind, StepResult
from railsforge.utils import console, run_command


class CommandError(Exception):
    """Raised when a fatal command exits with a non-zero status."""

    def __init__(self, invocation: CommandInvocation, returncode: int, stderr: str = ""):
        self.invocation = invocation
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed (exit {returncode}): {invocation.display}"
        if stderr:
            message += f"\n{stderr}"
        super().__init__(message)


class CommandRunner:
    """Executes :class:`CommandInvocation` values sequentially.

    Output is streamed to the terminal unless the invocation asks for it to
    be captured.
    """

    def __init__(self, cwd: str | Path, timeout: int = 1800) -> None:
        self.cwd = Path(cwd)
        self.timeout = timeout

    async def run(self, invocation: CommandInvocation) -> StepResult:
        console.print(f"  [bold]run[/bold]  {invocation.display}")
        returncode, stdout, stderr = await run_command(
            list(invocation.argv),
            cwd=self.cwd,
            timeout=self.timeout,
            capture=invocation.capture_output,
        )

        if returncode == 0:
            return StepResult.success(stdout)

        if invocation.fatal:
            raise CommandError(invocation, returncode, stderr)

        message = f"{invocation.display} exited with {returncode}"
        if stderr:
            message += f": {stderr}"
        return StepResult.failure(ErrorKind.COMMAND_FAILED, message)

    async def run_all(self, invocations: Iterable[CommandInvocation]) -> list[StepResult]:
        """Run *invocations* in order; the first fatal failure stops the sequence."""
        results: list[StepResult] = []
        for invocation in invocations:
            results.append(await self.run(invocation))
        return results
