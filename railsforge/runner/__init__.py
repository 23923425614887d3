"""railsforge runner module.

Executes external commands: package managers, framework generators, the
container stack and the final git commit.
"""

from .commands import CommandError, CommandRunner

__all__ = ["CommandError", "CommandRunner"]
