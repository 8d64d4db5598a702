# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Builder: co-iterate a source IR while editing a Canvas, then emit new IR.

Typical use:

	b = Builder(ir)
	for v, st in b:
		if isinstance(st.node, Call) and st.node.callee is old_fn:
			b[v] = Call(new_fn, st.node.args)
	new_ir = finish(b)

Each iteration step copies the next source statement onto the canvas under
the id it had in the source, resolving its references through `remap` and
binding a global callee to its current value. Between steps the caller may
overwrite, delete, append or insert; later steps see those edits. `finish`
renumbers the canvas and copies the source metadata into a fresh FunctionIR.

The source IR is never mutated: abandoning a Builder halfway leaves the input
exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .canvas import Canvas
from .errors import EmptyLocationTableError, InvalidIRError, ReentrantIterationError, UseAfterFinishError
from .ir import FunctionIR
from .nodes import Statement, bind_callee, map_references
from .validate import validate_code
from .variable import DANGLING_ID, Label, Reference, Variable

logger = logging.getLogger(__name__)


class BuilderState(Enum):
	IDLE = "idle"
	ITERATING = "iterating"
	EXHAUSTED = "exhausted"
	FINISHED = "finished"


class Builder:
	"""
	Wraps a Canvas plus the source IR it is being built from.

	Attributes:
	  source: the (read-only) IR being iterated.
	  remap: source Variable -> canvas Variable for every statement copied so far.
	  cursor: 0-based index of the next source statement to copy.
	  state: BuilderState.
	  renumbering: after finish, source Variable -> emitted Variable for every
	    retained source statement.
	"""

	def __init__(self, ir: FunctionIR):
		if not ir.linetable:
			raise EmptyLocationTableError(f"{ir.name}: line table is empty")
		self.source = ir
		self._canvas: Optional[Canvas] = Canvas(reserved=len(ir.code))
		self.remap: Dict[Variable, Variable] = {}
		self.cursor = 0
		self.state = BuilderState.IDLE
		self.renumbering: Dict[Variable, Variable] = {}
		self._iterating = False

	def __repr__(self) -> str:
		return f"<Builder {self.source.name} {self.state.value} {self.cursor}/{len(self.source)}>"

	def _check_live(self) -> None:
		if self._canvas is None:
			raise UseAfterFinishError(f"{self.source.name}: builder was already finished")

	@property
	def canvas(self) -> Canvas:
		self._check_live()
		return self._canvas

	# -- iteration --------------------------------------------------------

	def _resolve(self, ref: Reference) -> Reference:
		# Ids outside the source would alias fresh canvas ids; send them to 0
		# so renumber and validate_code report them.
		if not 1 <= ref.id <= len(self.source.code):
			return type(ref)(DANGLING_ID)
		# Forward references have no entry yet; they keep their reserved id
		# and resolve once that statement is placed.
		target = self.remap.get(Variable(ref.id))
		if target is None:
			return ref
		return Label(target.id) if isinstance(ref, Label) else target

	def _step(self) -> Optional[Tuple[Variable, Statement]]:
		"""Copy the next source statement onto the canvas; None when exhausted."""
		self._check_live()
		k = self.cursor
		if k >= len(self.source.code):
			self.state = BuilderState.EXHAUSTED
			return None
		self.state = BuilderState.ITERATING
		source_var = Variable(k + 1)
		node = map_references(self.source.code[k], self._resolve)
		node = bind_callee(node)
		st = Statement(node, self.source.types[k])
		v = self._canvas.place(source_var, st, self.source.locations[k])
		self.remap[source_var] = v
		self.cursor += 1
		return v, st

	def __iter__(self) -> "BuilderIterator":
		self._check_live()
		if self._iterating:
			raise ReentrantIterationError(f"{self.source.name}: iteration already in progress")
		return BuilderIterator(self)

	# -- direct edits -----------------------------------------------------

	def __getitem__(self, v: Variable) -> Statement:
		return self.canvas[v]

	def __setitem__(self, v: Variable, value: Any) -> None:
		self.canvas[v] = value

	def __delitem__(self, v: Variable) -> None:
		del self.canvas[v]

	def __contains__(self, v: object) -> bool:
		return v in self.canvas

	def __len__(self) -> int:
		return len(self.canvas)

	def append(self, value: Any, location: Optional[int] = None) -> Variable:
		return self.canvas.append(value, location)

	def insert_before(self, v: Variable, value: Any, location: Optional[int] = None) -> Variable:
		return self.canvas.insert_before(v, value, location)

	def pushfirst(self, value: Any, location: Optional[int] = None) -> Variable:
		return self.canvas.pushfirst(value, location)

	# -- emission ---------------------------------------------------------

	def finish(self, strict: bool = False) -> FunctionIR:
		"""
		Renumber the canvas and emit a new FunctionIR.

		The result carries the canvas statements (tombstones dropped) with
		their types and locations, plus the source's name, nargs, slotnames,
		metadata and line table.

		Policy: by default dangling references are logged and emitted as %0/#0
		so `validate_code` can report them alongside everything else. With
		`strict=True`:
		  - dangling references raise DanglingReferenceError before anything
		    is modified; the builder stays usable and can be fixed up.
		  - any other defect found by `validate_code` raises InvalidIRError
		    carrying the report and the rejected IR; the builder is consumed.
		"""
		canvas = self.canvas
		result = canvas.renumber(strict=strict)
		for d in result.dangling:
			logger.warning("%s: statement %r refers to missing %r", self.source.name, d.user, d.ref)
		statements = canvas.statements()
		ir = replace(
			self.source,
			code=tuple(st.node for st in statements),
			types=tuple(st.type for st in statements),
			locations=tuple(canvas.locations()),
		)
		self.renumbering = {src: result.mapping[v] for src, v in self.remap.items() if v in result.mapping}
		self._canvas = None
		self.state = BuilderState.FINISHED
		logger.debug(
			"finished %s: %d statements (%d from source, %d dropped)",
			ir.name,
			len(ir.code),
			len(self.renumbering),
			result.dropped,
		)
		if strict:
			report = validate_code(ir)
			if not report:
				raise InvalidIRError(report, ir=ir)
		return ir


class BuilderIterator:
	"""
	One iteration session over a Builder.

	Holds the builder's "iteration in progress" flag from creation until the
	source is exhausted or the iterator is closed (explicitly, or when it is
	garbage collected after an early `break`). A later session resumes at the
	builder's cursor.
	"""

	def __init__(self, builder: Builder):
		self._builder: Optional[Builder] = builder
		builder._iterating = True

	def __iter__(self) -> "BuilderIterator":
		return self

	def __next__(self) -> Tuple[Variable, Statement]:
		if self._builder is None:
			raise StopIteration
		try:
			item = self._builder._step()
		except BaseException:
			self.close()
			raise
		if item is None:
			self.close()
			raise StopIteration
		return item

	def close(self) -> None:
		if self._builder is not None:
			self._builder._iterating = False
			self._builder = None

	def __del__(self) -> None:
		self.close()


def finish(builder: Builder, strict: bool = False) -> FunctionIR:
	"""Emit the IR built by `builder`; see Builder.finish."""
	return builder.finish(strict=strict)


__all__ = ["Builder", "BuilderIterator", "BuilderState", "finish"]
