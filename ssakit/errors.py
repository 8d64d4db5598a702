# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error kinds raised by ssakit.

Everything is raised synchronously where the violation is detected; nothing
in the core retries or recovers. Errors carry their structured payload as
attributes so tooling can render them without parsing messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover - typing only
	from .canvas import DanglingReference
	from .ir import FunctionIR
	from .validate import ValidationReport


class IRError(Exception):
	"""Base class for all ssakit errors."""


class DanglingReferenceError(IRError):
	"""A retained statement refers to a deleted or never-defined statement."""

	def __init__(self, dangling: Sequence["DanglingReference"]) -> None:
		self.dangling = list(dangling)
		details = ", ".join(str(d) for d in self.dangling)
		super().__init__(f"{len(self.dangling)} dangling reference(s): {details}")


class EmptyLocationTableError(IRError):
	"""The IR has no line table entries."""


class ReentrantIterationError(IRError):
	"""A second iteration was started while one is already running."""


class UseAfterFinishError(IRError):
	"""A builder was used after `finish` emitted its IR."""


class IndexOutOfRangeError(IRError, IndexError):
	"""A canvas or IR position does not exist (or was deleted)."""


class UnboundGlobalError(IRError, NameError):
	"""A global reference names a symbol missing from its namespace."""

	def __init__(self, message: str, *, name: str) -> None:
		super().__init__(message)
		self.name = name


class LoweringUnavailableError(IRError):
	"""No lowering service was supplied or registered."""


class InvalidIRError(IRError):
	"""Validation found structural defects; `report` lists all of them."""

	def __init__(self, report: "ValidationReport", *, ir: "FunctionIR | None" = None) -> None:
		self.report = report
		self.ir = ir
		lines = [f"  {d}" for d in report.defects]
		super().__init__("invalid IR:\n" + "\n".join(lines))


class IRSyntaxError(IRError, ValueError):
	"""Malformed textual IR."""

	def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
		where = f"{line}:{column}: " if line is not None else ""
		super().__init__(f"{where}{message}")
		self.line = line
		self.column = column


__all__ = [
	"DanglingReferenceError",
	"EmptyLocationTableError",
	"IRError",
	"IRSyntaxError",
	"IndexOutOfRangeError",
	"InvalidIRError",
	"LoweringUnavailableError",
	"ReentrantIterationError",
	"UnboundGlobalError",
	"UseAfterFinishError",
]
