"""railsforge plan module.

Describes what a scaffolding run does as data: file operations, command
invocations and the flag table that maps invocation flags to actions.

Key objects:
    FLAG_ACTIONS       - ``{flag: ActionDescriptor}`` lookup table
    OptionSet          - Ordered, de-duplicated recognised flags
    build_action_plan  - OptionSet -> ActionPlan
    StepResult         - Result value of a non-fatal step
"""

from .flags import FLAG_ACTIONS, build_flag_table
from .models import (
    ActionDescriptor,
    ActionKind,
    CommandInvocation,
    CopyFile,
    ErrorKind,
    GemSpec,
    InjectText,
    MakeExecutable,
    MergeDirectory,
    Position,
    RenameSuffix,
    StepResult,
)
from .options import ActionPlan, OptionSet, build_action_plan, parse_options

__all__ = [
    # Flag table
    "FLAG_ACTIONS",
    "build_flag_table",
    # Options
    "ActionPlan",
    "OptionSet",
    "build_action_plan",
    "parse_options",
    # Models
    "ActionDescriptor",
    "ActionKind",
    "CommandInvocation",
    "CopyFile",
    "ErrorKind",
    "GemSpec",
    "InjectText",
    "MakeExecutable",
    "MergeDirectory",
    "Position",
    "RenameSuffix",
    "StepResult",
]
