# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
SSA value and statement-position handles.

A `Variable` names the value produced by the statement at a 1-based program
position; a `Label` names a statement position as a control-flow target. Both
wrap a plain integer but are deliberately not integers: they compare and hash
by id and support nothing else, so value references can never be mixed up
with labels, argument slots or location-table indices.

Id 0 never names a statement. Renumbering writes it into references whose
definition no longer exists so the validator can report them.
"""

from __future__ import annotations

from dataclasses import dataclass

DANGLING_ID = 0


def _check_id(value: object) -> int:
	if isinstance(value, bool) or not isinstance(value, int):
		raise TypeError(f"statement ids must be int, got {type(value).__name__}")
	if value < 0:
		raise ValueError(f"statement ids must be non-negative, got {value}")
	return value


@dataclass(frozen=True)
class Variable:
	"""Opaque handle for the value defined by statement `id`."""

	id: int

	def __post_init__(self) -> None:
		_check_id(self.id)

	def __repr__(self) -> str:
		return f"%{self.id}"


@dataclass(frozen=True)
class Label:
	"""Statement position used as a branch target or phi predecessor."""

	id: int

	def __post_init__(self) -> None:
		_check_id(self.id)

	def __repr__(self) -> str:
		return f"#{self.id}"


Reference = Variable | Label


def var(id: int) -> Variable:
	return Variable(id)


def label(id: int) -> Label:
	return Label(id)


__all__ = ["DANGLING_ID", "Label", "Reference", "Variable", "label", "var"]
