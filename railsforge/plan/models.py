"""Pydantic models describing a scaffolding plan.

A plan is a totally ordered list of file operations and command invocations.
Source paths are relative to the template source root; destination and
target paths are relative to the application being scaffolded.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# File operations
# ---------------------------------------------------------------------------


class Position(str, Enum):
    """Where an injected payload goes relative to its anchor."""

    BEFORE = "before"
    AFTER = "after"


class _Operation(BaseModel):
    model_config = ConfigDict(frozen=True)


class CopyFile(_Operation):
    """Copy one template file into the application."""

    op: Literal["copy"] = "copy"
    src: str
    dest: str = ""
    overwrite: bool = False

    @property
    def destination(self) -> str:
        return self.dest or self.src


class MergeDirectory(_Operation):
    """Recursively copy a template directory into the application."""

    op: Literal["merge"] = "merge"
    src: str
    dest: str = ""
    overwrite: bool = False

    @property
    def destination(self) -> str:
        return self.dest or self.src


class InjectText(_Operation):
    """Insert *payload* next to the first occurrence of *anchor* in *target*."""

    op: Literal["inject"] = "inject"
    target: str
    anchor: str
    payload: str
    position: Position = Position.AFTER


class RenameSuffix(_Operation):
    """Rename every file under *root* ending in *old_suffix* to *new_suffix*."""

    op: Literal["rename"] = "rename"
    root: str
    old_suffix: str
    new_suffix: str


class MakeExecutable(_Operation):
    """Add execute permission to files under *root* matching *pattern*."""

    op: Literal["chmod"] = "chmod"
    root: str
    pattern: str = "*"


FileOperation = Annotated[
    Union[CopyFile, MergeDirectory, InjectText, RenameSuffix, MakeExecutable],
    Field(discriminator="op"),
]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class CommandInvocation(BaseModel):
    """A single external command.

    ``fatal`` invocations abort the run on a non-zero exit; the others are
    reported and the run continues.
    """

    model_config = ConfigDict(frozen=True)

    argv: tuple[str, ...]
    description: str = ""
    capture_output: bool = False
    fatal: bool = True

    @property
    def display(self) -> str:
        return " ".join(self.argv)


class GemSpec(BaseModel):
    """A Ruby gem added to the application's Gemfile."""

    model_config = ConfigDict(frozen=True)

    name: str
    requirements: tuple[str, ...] = ()
    group: str | None = None

    def bundle_add(self) -> CommandInvocation:
        argv = ["bundle", "add", self.name, "--skip-install"]
        if self.requirements:
            argv.extend(["--version", ", ".join(self.requirements)])
        if self.group:
            argv.extend(["--group", self.group])
        return CommandInvocation(argv=tuple(argv), description=f"Add gem {self.name}")


# ---------------------------------------------------------------------------
# Flag actions
# ---------------------------------------------------------------------------


class ActionKind(str, Enum):
    VARIANT = "variant"
    ADDON = "addon"
    CONTAINER = "container"


class ActionDescriptor(BaseModel):
    """Everything one recognised invocation flag contributes to the plan."""

    model_config = ConfigDict(frozen=True)

    flag: str
    kind: ActionKind
    help: str = ""
    summary: str = ""
    operations: tuple[FileOperation, ...] = ()
    commands: tuple[CommandInvocation, ...] = ()
    gems: tuple[GemSpec, ...] = ()
    container_profile: str | None = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class ErrorKind(str, Enum):
    ANCHOR_NOT_FOUND = "anchor_not_found"
    ALREADY_PRESENT = "already_present"
    SOURCE_MISSING = "source_missing"
    SKIPPED_EXISTING = "skipped_existing"
    COMMAND_FAILED = "command_failed"
    ENGINE_MISSING = "engine_missing"
    NOT_READY = "not_ready"
    PROVISION_FAILED = "provision_failed"
    COMMIT_FAILED = "commit_failed"
    IO_ERROR = "io_error"


class StepResult(BaseModel):
    """Outcome of a non-fatal step.

    ``ok`` is ``True`` for successes and for silent no-ops (``kind`` then
    records why nothing happened); ``False`` results are reported as
    warnings.
    """

    ok: bool
    kind: ErrorKind | None = None
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> "StepResult":
        return cls(ok=True, message=message)

    @classmethod
    def noop(cls, kind: ErrorKind, message: str = "") -> "StepResult":
        return cls(ok=True, kind=kind, message=message)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "StepResult":
        return cls(ok=False, kind=kind, message=message)
