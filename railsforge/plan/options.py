"""Option parsing: invocation flags to an ordered action plan."""

from __future__ import annotations

import argparse
from collections.abc import Iterable
from dataclasses import dataclass, field

from .flags import FLAG_ACTIONS
from .models import ActionDescriptor, ActionKind, CommandInvocation, FileOperation, GemSpec

_KIND_ORDER: dict[ActionKind, int] = {
    ActionKind.VARIANT: 0,
    ActionKind.ADDON: 1,
    ActionKind.CONTAINER: 2,
}


@dataclass(frozen=True)
class OptionSet:
    """The recognised flags of one invocation, de-duplicated, last position kept."""

    flags: tuple[str, ...] = ()

    @classmethod
    def from_flags(cls, flags: Iterable[str]) -> "OptionSet":
        """Build an ``OptionSet``, silently dropping unrecognised flags.

        A repeated flag moves to its latest position, so the order reflects
        the last time each flag was given.
        """
        seen: list[str] = []
        for flag in flags:
            if flag not in FLAG_ACTIONS:
                continue
            if flag in seen:
                seen.remove(flag)
            seen.append(flag)
        return cls(flags=tuple(seen))

    def __contains__(self, flag: object) -> bool:
        return flag in self.flags

    def __iter__(self):
        return iter(self.flags)

    def __len__(self) -> int:
        return len(self.flags)

    def _of_kind(self, kind: ActionKind) -> tuple[str, ...]:
        return tuple(f for f in self.flags if FLAG_ACTIONS[f].kind is kind)

    @property
    def variants(self) -> tuple[str, ...]:
        return self._of_kind(ActionKind.VARIANT)

    @property
    def addons(self) -> tuple[str, ...]:
        return self._of_kind(ActionKind.ADDON)

    @property
    def container_flag(self) -> str | None:
        """The active container flag; the last one listed wins."""
        containers = self._of_kind(ActionKind.CONTAINER)
        return containers[-1] if containers else None


@dataclass(frozen=True)
class ActionPlan:
    """Flag-driven part of a run, in execution order.

    Variants run first, then addons, then the container profile. Within a
    kind the invocation order is kept, so among overlapping variants the
    last one listed wins on shared destinations.
    """

    actions: tuple[ActionDescriptor, ...] = ()
    container: ActionDescriptor | None = None
    gems: tuple[GemSpec, ...] = field(default=())

    @property
    def operations(self) -> list[FileOperation]:
        return [op for action in self.actions for op in action.operations]

    @property
    def commands(self) -> list[CommandInvocation]:
        return [cmd for action in self.actions for cmd in action.commands]


def build_action_plan(options: OptionSet) -> ActionPlan:
    """Resolve *options* into an :class:`ActionPlan` via the flag table."""
    selected = [FLAG_ACTIONS[flag] for flag in options]
    ordered = sorted(
        (a for a in selected if a.kind is not ActionKind.CONTAINER),
        key=lambda a: _KIND_ORDER[a.kind],
    )
    container_flag = options.container_flag
    container = FLAG_ACTIONS[container_flag] if container_flag else None

    gems: list[GemSpec] = []
    for action in ordered:
        gems.extend(g for g in action.gems if g not in gems)

    return ActionPlan(actions=tuple(ordered), container=container, gems=tuple(gems))


# ---------------------------------------------------------------------------
# argparse integration
# ---------------------------------------------------------------------------

FLAGS_DEST = "flags"


def add_flag_arguments(parser: argparse.ArgumentParser) -> None:
    """Register every flag in the table on *parser*, preserving invocation order."""
    group = parser.add_argument_group("scaffold options")
    for flag, action in FLAG_ACTIONS.items():
        group.add_argument(
            flag,
            dest=FLAGS_DEST,
            action="append_const",
            const=flag,
            help=action.help,
        )


def parse_options(argv: Iterable[str]) -> OptionSet:
    """Parse a raw argument list, ignoring anything not in the flag table."""
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    add_flag_arguments(parser)
    namespace, _unknown = parser.parse_known_args(list(argv))
    return OptionSet.from_flags(getattr(namespace, FLAGS_DEST) or [])
