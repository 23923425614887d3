"""File Operation Engine.

Applies copy, directory-merge, text-injection and post-processing
operations to the application tree. Every operation returns a
:class:`StepResult`; none of them raise for conditions the plan is expected
to meet on a rerun or on a framework scaffold that drifted from the
anchors it relies on.
"""

from __future__ import annotations

import shutil
import stat
from collections.abc import Iterable
from pathlib import Path

from railsforge.plan.models import (
    CopyFile,
    ErrorKind,
    FileOperation,
    InjectText,
    MakeExecutable,
    MergeDirectory,
    Position,
    RenameSuffix,
    StepResult,
)

_EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class FileOperationEngine:
    """Applies :data:`FileOperation` values against a target tree.

    Args:
        source_root: Root of the template assets (``src`` paths).
        target_root: Root of the application being scaffolded.
    """

    def __init__(self, source_root: str | Path, target_root: str | Path) -> None:
        self.source_root = Path(source_root)
        self.target_root = Path(target_root)

    # -- Dispatch ------------------------------------------------------------

    def apply(self, operation: FileOperation) -> StepResult:
        """Apply one operation; filesystem errors become ``io_error`` results."""
        try:
            return self._dispatch(operation)
        except (OSError, UnicodeDecodeError) as exc:
            return StepResult.failure(
                ErrorKind.IO_ERROR, f"{operation.op} operation failed: {exc}"
            )

    def _dispatch(self, operation: FileOperation) -> StepResult:
        if isinstance(operation, CopyFile):
            return self.copy_file(operation)
        if isinstance(operation, MergeDirectory):
            return self.merge_directory(operation)
        if isinstance(operation, InjectText):
            return self.inject_text(operation)
        if isinstance(operation, RenameSuffix):
            return self.rename_suffix(operation)
        if isinstance(operation, MakeExecutable):
            return self.make_executable(operation)
        raise TypeError(f"Unsupported file operation: {operation!r}")

    def apply_all(self, operations: Iterable[FileOperation]) -> list[StepResult]:
        """Apply *operations* strictly in order and collect their results."""
        return [self.apply(operation) for operation in operations]

    # -- Copy ----------------------------------------------------------------

    def copy_file(self, operation: CopyFile) -> StepResult:
        src = self.source_root / operation.src
        dest = self.target_root / operation.destination
        if not src.is_file():
            return StepResult.failure(
                ErrorKind.SOURCE_MISSING, f"Template file not found: {operation.src}"
            )
        return _copy(src, dest, operation.overwrite, operation.destination)

    def merge_directory(self, operation: MergeDirectory) -> StepResult:
        """Copy every file under ``src`` into ``dest`` with per-file overwrite policy."""
        src_dir = self.source_root / operation.src
        dest_dir = self.target_root / operation.destination
        if not src_dir.is_dir():
            return StepResult.failure(
                ErrorKind.SOURCE_MISSING, f"Template directory not found: {operation.src}"
            )

        copied = 0
        kept = 0
        for src in sorted(p for p in src_dir.rglob("*") if p.is_file()):
            rel = src.relative_to(src_dir)
            result = _copy(src, dest_dir / rel, operation.overwrite, str(rel))
            if result.kind is ErrorKind.SKIPPED_EXISTING:
                kept += 1
            else:
                copied += 1

        message = f"{operation.src} -> {operation.destination}: {copied} copied"
        if kept:
            message += f", {kept} kept"
        return StepResult.success(message)

    # -- Injection -----------------------------------------------------------

    def inject_text(self, operation: InjectText) -> StepResult:
        """Insert the payload next to the first occurrence of the anchor.

        A payload already sitting next to the anchor is left alone, so
        applying the same injection twice changes the file only once.
        """
        target = self.target_root / operation.target
        if not target.is_file():
            return StepResult.failure(
                ErrorKind.ANCHOR_NOT_FOUND,
                f"Cannot inject into {operation.target}: file not found",
            )

        content = target.read_text(encoding="utf-8")
        index = content.find(operation.anchor)
        if index < 0:
            return StepResult.failure(
                ErrorKind.ANCHOR_NOT_FOUND,
                f"Anchor {operation.anchor!r} not found in {operation.target}",
            )

        if operation.position is Position.AFTER:
            at = index + len(operation.anchor)
            present = content.startswith(operation.payload, at)
        else:
            at = index
            present = content[:at].endswith(operation.payload)

        if present:
            return StepResult.noop(
                ErrorKind.ALREADY_PRESENT,
                f"{operation.target} already contains the injected text",
            )

        target.write_text(content[:at] + operation.payload + content[at:], encoding="utf-8")
        return StepResult.success(f"Injected into {operation.target}")

    # -- Post-processing -----------------------------------------------------

    def rename_suffix(self, operation: RenameSuffix) -> StepResult:
        root = self.target_root / operation.root
        if not root.is_dir():
            return StepResult.noop(ErrorKind.SOURCE_MISSING, f"{operation.root} does not exist")

        renamed = 0
        for path in sorted(root.rglob(f"*{operation.old_suffix}")):
            if not path.is_file():
                continue
            new_path = path.with_name(path.name[: -len(operation.old_suffix)] + operation.new_suffix)
            path.replace(new_path)
            renamed += 1
        return StepResult.success(f"Renamed {renamed} file(s) under {operation.root}")

    def make_executable(self, operation: MakeExecutable) -> StepResult:
        root = self.target_root / operation.root
        if not root.is_dir():
            return StepResult.noop(ErrorKind.SOURCE_MISSING, f"{operation.root} does not exist")

        changed = 0
        for path in sorted(root.glob(operation.pattern)):
            if path.is_file():
                path.chmod(path.stat().st_mode | _EXECUTE_BITS)
                changed += 1
        return StepResult.success(f"Made {changed} file(s) executable under {operation.root}")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _copy(src: Path, dest: Path, overwrite: bool, label: str) -> StepResult:
    """Copy one file, honouring the overwrite policy."""
    if dest.exists() and not overwrite:
        return StepResult.noop(ErrorKind.SKIPPED_EXISTING, f"{label} exists, kept")
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dest)
    return StepResult.success(f"Copied {label}")
