"""Shared utility functions for railsforge.

Provides async command execution, Rich-based status output, duration
formatting, and TCP readiness polling.
"""

from __future__ import annotations

import asyncio
import shutil
import time
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    capture: bool = True,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Program and arguments; no shell is involved.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.  A missing executable or a
        timeout is reported as returncode ``-1`` with the reason in stderr.
    """
    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError as exc:
        return (-1, "", f"Command not found: {exc.filename or cmd[0]}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


def command_exists(name: str) -> bool:
    """Return ``True`` if *name* resolves to an executable on ``PATH``."""
    return shutil.which(name) is not None


# ---------------------------------------------------------------------------
# Readiness polling
# ---------------------------------------------------------------------------


async def wait_for_port(
    host: str,
    port: int,
    timeout: float = 60.0,
    interval: float = 0.5,
    backoff: float = 2.0,
    max_interval: float = 5.0,
) -> bool:
    """Poll a TCP port until it accepts connections or *timeout* expires.

    The delay between attempts starts at *interval* and is multiplied by
    *backoff* after every failed attempt, capped at *max_interval*.

    Returns:
        ``True`` if a connection succeeded within the timeout window,
        ``False`` otherwise.
    """
    deadline = time.monotonic() + timeout
    delay = interval

    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=min(remaining, 3.0)
            )
        except (OSError, asyncio.TimeoutError):
            pass
        else:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
            return True

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        await asyncio.sleep(min(delay, remaining))
        delay = min(delay * backoff, max_interval)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


PHASE_NAMES: dict[int, str] = {
    1: "DEPENDENCIES",
    2: "SOURCE",
    3: "FRAMEWORK",
    4: "VARIANTS",
    5: "TEMPLATES",
    6: "DATABASE",
    7: "FINALIZE",
}

PHASE_COLORS: dict[int, str] = {
    1: "bright_cyan",
    2: "bright_green",
    3: "bright_yellow",
    4: "bright_magenta",
    5: "bright_blue",
    6: "bright_red",
    7: "bright_white",
}


def print_phase_header(phase: int, name: str) -> None:
    """Print a full-width rule naming the phase, coloured per phase."""
    color = PHASE_COLORS.get(phase, "white")
    console.print()
    console.print(
        Rule(
            f"[bold {color}] Phase {phase}: {name.upper()} [/bold {color}]",
            style=color,
        )
    )
    console.print()


def print_banner(title: str, body: str) -> None:
    """Print a bordered start-of-run banner."""
    console.print(
        Panel(body, title=f"[bold]{title}[/bold]", border_style="bright_cyan")
    )


def print_info(message: str) -> None:
    """Print a cyan progress message."""
    console.print(f"[cyan]{message}[/cyan]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
