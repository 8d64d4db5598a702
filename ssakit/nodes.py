# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Node kinds of the lowered IR and the generic walkers over them.

The set of node kinds is closed:

  Call      callee(args...)
  Branch    jump to `target`, or jump when `cond` is false
  Return    return `value`
  Phi       merge of values flowing in from predecessor statements
  Const     constant literal
  GlobalRef symbol in a module namespace
  Argument  reference to the n-th function argument (1-based)

Operands (call callee/args, branch cond, return value, phi values) are a
`Variable`, an `Argument`, a `GlobalRef`, or any other Python object, which is
taken as a literal constant. `references` and `map_references` are the only
places that know where references live inside each node kind; everything
that rewrites or checks references goes through them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple

from .errors import UnboundGlobalError
from .variable import Label, Reference, Variable


class _Unknown:
	"""Sentinel for statements without an inferred type."""

	_instance: Optional["_Unknown"] = None

	def __new__(cls) -> "_Unknown":
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __repr__(self) -> str:
		return "unknown"

	def __reduce__(self):
		return (_Unknown, ())


UNKNOWN = _Unknown()


@dataclass(frozen=True)
class Call:
	"""callee(args...)"""

	callee: Any
	args: Tuple[Any, ...] = ()

	def __post_init__(self) -> None:
		object.__setattr__(self, "args", tuple(self.args))


@dataclass(frozen=True)
class Branch:
	"""Jump to `target`; with `cond`, jump only when `cond` is false."""

	target: Label
	cond: Any = None

	def __post_init__(self) -> None:
		if not isinstance(self.target, Label):
			raise TypeError(f"branch target must be a Label, got {self.target!r}")

	@property
	def conditional(self) -> bool:
		return self.cond is not None


@dataclass(frozen=True)
class Return:
	value: Any = None


@dataclass(frozen=True)
class Phi:
	"""Value merge: `incoming` pairs a predecessor label with the value it carries."""

	incoming: Tuple[Tuple[Label, Any], ...] = ()

	def __post_init__(self) -> None:
		pairs = tuple((edge, value) for edge, value in self.incoming)
		for edge, _ in pairs:
			if not isinstance(edge, Label):
				raise TypeError(f"phi edges must be Labels, got {edge!r}")
		object.__setattr__(self, "incoming", pairs)

	@classmethod
	def of(cls, incoming: Mapping[Label, Any]) -> "Phi":
		return cls(tuple(incoming.items()))

	def as_dict(self) -> dict[Label, Any]:
		return dict(self.incoming)


@dataclass(frozen=True)
class Const:
	value: Any


@dataclass(frozen=True, eq=False)
class GlobalRef:
	"""
	`name` looked up in `namespace` (a mapping or a module-like object).

	Two refs are equal when they name the same symbol in the *same* namespace
	object; namespaces are compared by identity, never by content.
	"""

	namespace: Any
	name: str

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, GlobalRef):
			return NotImplemented
		return self.namespace is other.namespace and self.name == other.name

	def __hash__(self) -> int:
		return hash((id(self.namespace), self.name))

	def __repr__(self) -> str:
		return f"GlobalRef({self.name!r})"


@dataclass(frozen=True)
class Argument:
	n: int

	def __post_init__(self) -> None:
		if isinstance(self.n, bool) or not isinstance(self.n, int):
			raise TypeError(f"argument index must be int, got {self.n!r}")

	def __repr__(self) -> str:
		return f"${self.n}"


NODE_TYPES = (Call, Branch, Return, Phi, Const, GlobalRef, Argument)
Node = Call | Branch | Return | Phi | Const | GlobalRef | Argument


@dataclass(frozen=True)
class Statement:
	"""
	A node plus an optional inferred type.

	`type` exists for callers doing their own local propagation; nothing in
	ssakit reads it. Builders and canvases wrap raw nodes on the way in and
	unwrap them when emitting IR, so most callers only see Statements during
	iteration.
	"""

	node: Node
	type: Any = UNKNOWN

	def __post_init__(self) -> None:
		if not isinstance(self.node, NODE_TYPES):
			raise TypeError(f"not an IR node: {self.node!r}")


def as_statement(value: Any) -> Statement:
	"""Wrap a raw node (type unknown); pass Statements through."""
	if isinstance(value, Statement):
		return value
	if isinstance(value, NODE_TYPES):
		return Statement(value)
	raise TypeError(f"expected an IR node or Statement, got {type(value).__name__}")


def operands(node: Node) -> list[Any]:
	"""Value operands of `node` (callee, args, cond, return value, phi values)."""
	if isinstance(node, Call):
		return [node.callee, *node.args]
	if isinstance(node, Branch):
		return [] if node.cond is None else [node.cond]
	if isinstance(node, Return):
		return [node.value]
	if isinstance(node, Phi):
		return [value for _, value in node.incoming]
	if isinstance(node, (Const, GlobalRef, Argument)):
		return []
	raise TypeError(f"not an IR node: {node!r}")


def _operand_refs(operand: Any) -> list[Reference]:
	return [operand] if isinstance(operand, Variable) else []


def references(node: Node) -> list[Reference]:
	"""Every Variable/Label embedded in `node`, in field order."""
	if isinstance(node, Call):
		refs = _operand_refs(node.callee)
		for arg in node.args:
			refs.extend(_operand_refs(arg))
		return refs
	if isinstance(node, Branch):
		return [node.target] + _operand_refs(node.cond)
	if isinstance(node, Return):
		return _operand_refs(node.value)
	if isinstance(node, Phi):
		refs: list[Reference] = []
		for edge, value in node.incoming:
			refs.append(edge)
			refs.extend(_operand_refs(value))
		return refs
	if isinstance(node, (Const, GlobalRef, Argument)):
		return []
	raise TypeError(f"not an IR node: {node!r}")


def value_references(node: Node) -> list[Variable]:
	return [ref for ref in references(node) if isinstance(ref, Variable)]


def map_references(node: Node, fn: Callable[[Reference], Reference]) -> Node:
	"""
	Return `node` with every embedded Variable/Label replaced by `fn(ref)`.

	Nodes without references are returned as-is (they are immutable).
	"""

	def op(operand: Any) -> Any:
		return fn(operand) if isinstance(operand, Variable) else operand

	if isinstance(node, Call):
		return Call(op(node.callee), tuple(op(a) for a in node.args))
	if isinstance(node, Branch):
		cond = None if node.cond is None else op(node.cond)
		return Branch(fn(node.target), cond)
	if isinstance(node, Return):
		return Return(op(node.value))
	if isinstance(node, Phi):
		return Phi(tuple((fn(edge), op(value)) for edge, value in node.incoming))
	if isinstance(node, (Const, GlobalRef, Argument)):
		return node
	raise TypeError(f"not an IR node: {node!r}")


def resolve_global(ref: GlobalRef) -> Any:
	"""Current binding of `ref` in its namespace."""
	ns = ref.namespace
	if isinstance(ns, Mapping):
		try:
			return ns[ref.name]
		except KeyError:
			raise UnboundGlobalError(f"global {ref.name!r} is not bound", name=ref.name) from None
	try:
		return getattr(ns, ref.name)
	except AttributeError:
		raise UnboundGlobalError(f"global {ref.name!r} is not bound in {ns!r}", name=ref.name) from None


def bind_callee(node: Node) -> Node:
	"""Replace a GlobalRef callee with the object it is bound to right now."""
	if isinstance(node, Call) and isinstance(node.callee, GlobalRef):
		return Call(resolve_global(node.callee), node.args)
	return node


def is_terminator(node: Node) -> bool:
	if isinstance(node, Return):
		return True
	return isinstance(node, Branch) and not node.conditional


__all__ = [
	"Argument",
	"Branch",
	"Call",
	"Const",
	"GlobalRef",
	"NODE_TYPES",
	"Node",
	"Phi",
	"Return",
	"Statement",
	"UNKNOWN",
	"as_statement",
	"bind_callee",
	"is_terminator",
	"map_references",
	"operands",
	"references",
	"resolve_global",
	"value_references",
]
