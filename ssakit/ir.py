# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The lowered function body handed to and returned by ssakit.

`FunctionIR` has the same shape on the way in (from the host's lowering
service or the text reader) and on the way out (from `Builder.finish`), so a
finished IR is a drop-in replacement for its source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple

from .errors import IndexOutOfRangeError
from .nodes import NODE_TYPES, UNKNOWN, Node, Statement
from .variable import Variable


@dataclass(frozen=True)
class LineInfo:
	"""One debug line-table entry (best-effort file/line/function)."""

	file: Optional[str] = None
	line: int = 0
	function: Optional[str] = None


@dataclass(frozen=True)
class FunctionIR:
	"""
	Statement list plus parallel location table and retained metadata.

	Fields:
	  code: nodes in program order; statement k (1-based) defines Variable(k).
	  locations: per-statement index into `linetable`, same length as `code`.
	  linetable: debug line entries, passed through untouched.
	  types: per-statement advisory types; defaults to UNKNOWN everywhere.
	  name / nargs / slotnames / metadata: retained as-is by every transform.

	Sequences are frozen into tuples so a source IR can be shared with a
	Builder without being mutated.
	"""

	code: Tuple[Node, ...]
	locations: Tuple[int, ...]
	linetable: Tuple[LineInfo, ...]
	types: Tuple[Any, ...] = ()
	name: str = "<lowered>"
	nargs: int = 0
	slotnames: Tuple[str, ...] = ()
	metadata: Mapping[str, Any] = field(default_factory=dict)

	def __post_init__(self) -> None:
		code = tuple(self.code)
		for node in code:
			if not isinstance(node, NODE_TYPES):
				raise TypeError(f"not an IR node: {node!r}")
		types = tuple(self.types) if self.types else (UNKNOWN,) * len(code)
		if len(types) != len(code):
			raise ValueError(f"types has {len(types)} entries for {len(code)} statements")
		object.__setattr__(self, "code", code)
		object.__setattr__(self, "types", types)
		object.__setattr__(self, "locations", tuple(self.locations))
		object.__setattr__(self, "linetable", tuple(self.linetable))
		object.__setattr__(self, "slotnames", tuple(self.slotnames))
		object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

	def __len__(self) -> int:
		return len(self.code)

	def variables(self) -> Iterator[Variable]:
		return (Variable(i) for i in range(1, len(self.code) + 1))

	def statement(self, v: Variable) -> Statement:
		"""Statement defining `v`."""
		if not isinstance(v, Variable):
			raise TypeError(f"IR positions are addressed by Variable, got {v!r}")
		if not 1 <= v.id <= len(self.code):
			raise IndexOutOfRangeError(f"{v!r} is outside 1..{len(self.code)}")
		return Statement(self.code[v.id - 1], self.types[v.id - 1])

	def statements(self) -> Iterator[Tuple[Variable, Statement]]:
		for v in self.variables():
			yield v, self.statement(v)


__all__ = ["FunctionIR", "LineInfo"]
