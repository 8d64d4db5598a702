# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Canvas: the mutable statement buffer underneath a Builder.

Every slot is keyed by a permanent id, the Variable that names it, and a
separate order list records program order. That split gives:

  append            O(1) amortized
  get / set         O(1)
  delete            O(1) (the slot is tombstoned, nothing shifts)
  insert_before     O(n) (linear search of the order list plus a list insert)
  pushfirst         O(n)
  renumber          O(n + total operands)

so building a canvas front to back stays cheap while inserting in the middle
is merely slow. Ids stay valid for the whole session, whatever is inserted
or deleted around them, until `renumber` compacts the canvas into the dense
id space `1..m`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import DanglingReferenceError, IndexOutOfRangeError
from .nodes import Statement, as_statement, map_references
from .variable import DANGLING_ID, Label, Reference, Variable

logger = logging.getLogger(__name__)


@dataclass
class _Slot:
	statement: Statement
	location: int
	deleted: bool = False


@dataclass(frozen=True)
class DanglingReference:
	"""`user` (pre-renumbering id) refers to `ref`, which has no live definition."""

	user: Variable
	ref: Reference

	def __str__(self) -> str:
		return f"{self.user!r} -> {self.ref!r}"


@dataclass
class Renumbering:
	"""
	Outcome of `Canvas.renumber`.

	mapping: old Variable -> new Variable for every retained slot.
	dangling: references that could not be mapped (rewritten to id 0).
	dropped: number of tombstoned slots removed.
	"""

	mapping: Dict[Variable, Variable] = field(default_factory=dict)
	dangling: List[DanglingReference] = field(default_factory=list)
	dropped: int = 0


class Canvas:
	"""
	Ordered, growable container of Statements with parallel locations.

	Indexing is by Variable only: `canvas[v]`, `canvas[v] = node`,
	`del canvas[v]`. Raw nodes are wrapped into Statements with an unknown
	type; Statements are stored as given.

	`reserved` holds back ids `1..reserved` for `place`, which the Builder
	uses so that a statement copied from the source keeps the id it had
	there. Fresh ids from `append`/`insert_before` start after the
	reservation.
	"""

	def __init__(self, reserved: int = 0):
		if reserved < 0:
			raise ValueError("reserved must be non-negative")
		self._slots: Dict[int, _Slot] = {}
		self._order: List[int] = []
		self._reserved = reserved
		self._next_id = reserved + 1
		self._live = 0
		# (old id, new id) pairs from the last renumber.
		self.substitutions: List[Tuple[int, int]] = []

	# -- lookup -----------------------------------------------------------

	def _slot(self, v: Variable, *, allow_deleted: bool = False) -> _Slot:
		if not isinstance(v, Variable):
			raise TypeError(f"canvas positions are addressed by Variable, got {v!r}")
		slot = self._slots.get(v.id)
		if slot is None:
			raise IndexOutOfRangeError(f"{v!r} is not on the canvas")
		if slot.deleted and not allow_deleted:
			raise IndexOutOfRangeError(f"{v!r} was deleted")
		return slot

	def __getitem__(self, v: Variable) -> Statement:
		return self._slot(v).statement

	def __setitem__(self, v: Variable, value: Any) -> None:
		slot = self._slot(v, allow_deleted=True)
		slot.statement = as_statement(value)
		if slot.deleted:
			slot.deleted = False
			self._live += 1

	def __delitem__(self, v: Variable) -> None:
		slot = self._slot(v)
		slot.deleted = True
		self._live -= 1

	def __contains__(self, v: object) -> bool:
		if not isinstance(v, Variable):
			return False
		slot = self._slots.get(v.id)
		return slot is not None and not slot.deleted

	def __len__(self) -> int:
		return self._live

	def __iter__(self) -> Iterator[Tuple[Variable, Statement]]:
		for sid in self._order:
			slot = self._slots[sid]
			if not slot.deleted:
				yield Variable(sid), slot.statement

	def location(self, v: Variable) -> int:
		return self._slot(v).location

	def set_location(self, v: Variable, location: int) -> None:
		self._slot(v).location = location

	def statements(self) -> List[Statement]:
		return [st for _, st in self]

	def locations(self) -> List[int]:
		return [self._slots[v.id].location for v, _ in self]

	def _default_location(self) -> int:
		for sid in reversed(self._order):
			slot = self._slots[sid]
			if not slot.deleted:
				return slot.location
		return 0

	# -- growth -----------------------------------------------------------

	def _new_slot(self, value: Any, location: int) -> int:
		sid = self._next_id
		self._next_id += 1
		self._slots[sid] = _Slot(as_statement(value), location)
		self._live += 1
		return sid

	def append(self, value: Any, location: Optional[int] = None) -> Variable:
		"""Add a statement at the end of program order; returns its Variable."""
		if location is None:
			location = self._default_location()
		sid = self._new_slot(value, location)
		self._order.append(sid)
		return Variable(sid)

	def place(self, v: Variable, value: Any, location: int) -> Variable:
		"""Materialize reserved id `v` at the end of program order."""
		if not isinstance(v, Variable):
			raise TypeError(f"canvas positions are addressed by Variable, got {v!r}")
		if not 1 <= v.id <= self._reserved:
			raise IndexOutOfRangeError(f"{v!r} is not a reserved id")
		if v.id in self._slots:
			raise IndexOutOfRangeError(f"{v!r} was already placed")
		self._slots[v.id] = _Slot(as_statement(value), location)
		self._order.append(v.id)
		self._live += 1
		return v

	def insert_before(self, v: Variable, value: Any, location: Optional[int] = None) -> Variable:
		"""
		Insert a statement immediately before `v` in program order.

		O(n): `v` is looked up in the order list and everything after the
		insertion point shifts. `v` itself keeps its id. The location defaults
		to `v`'s. `v` may be a deleted slot; its position still anchors the insert.
		"""
		anchor = self._slot(v, allow_deleted=True)
		if location is None:
			location = anchor.location
		pos = self._order.index(v.id)
		sid = self._new_slot(value, location)
		self._order.insert(pos, sid)
		return Variable(sid)

	def pushfirst(self, value: Any, location: Optional[int] = None) -> Variable:
		"""Insert a statement at the very start of program order (O(n))."""
		if location is None:
			location = self._slots[self._order[0]].location if self._order else 0
		sid = self._new_slot(value, location)
		self._order.insert(0, sid)
		return Variable(sid)

	# -- renumbering ------------------------------------------------------

	def renumber(self, strict: bool = False) -> Renumbering:
		"""
		Compact live slots into ids `1..m` in program order and rewrite refs.

		Every Variable/Label embedded in a retained statement is mapped to its
		new id. References to tombstoned or never-placed ids are collected in
		`Renumbering.dangling` and rewritten to id 0; with `strict=True` they
		raise DanglingReferenceError instead, before anything is modified.
		"""
		result = Renumbering()
		new_ids: Dict[int, int] = {}
		for sid in self._order:
			if self._slots[sid].deleted:
				result.dropped += 1
				continue
			new_ids[sid] = len(new_ids) + 1

		rewritten: List[_Slot] = []
		for sid, new_id in new_ids.items():
			slot = self._slots[sid]
			user = Variable(sid)

			def rewrite(ref: Reference, user: Variable = user) -> Reference:
				target = new_ids.get(ref.id)
				if target is None:
					result.dangling.append(DanglingReference(user, ref))
					target = DANGLING_ID
				return Label(target) if isinstance(ref, Label) else Variable(target)

			node = map_references(slot.statement.node, rewrite)
			rewritten.append(_Slot(Statement(node, slot.statement.type), slot.location))

		if strict and result.dangling:
			raise DanglingReferenceError(result.dangling)

		self._slots = {i: slot for i, slot in enumerate(rewritten, start=1)}
		self._order = list(self._slots)
		self._reserved = 0
		self._next_id = len(rewritten) + 1
		self._live = len(rewritten)
		self.substitutions = list(new_ids.items())
		result.mapping = {Variable(old): Variable(new) for old, new in self.substitutions}
		logger.debug(
			"renumbered canvas: %d retained, %d dropped, %d dangling",
			len(rewritten),
			result.dropped,
			len(result.dangling),
		)
		return result


__all__ = ["Canvas", "DanglingReference", "Renumbering"]
