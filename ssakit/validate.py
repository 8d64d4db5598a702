# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural validation of FunctionIR.

`validate_code` never stops at the first problem: it walks the whole IR and
returns a ValidationReport listing every defect, so tooling can show a
complete diagnostic in one pass. Checks, in order:

  (a) location table: line table non-empty, one location per statement,
      every location indexes the line table.
  (b) references: every Variable names an existing statement that precedes
      its use (subject to the forward-reference policy), every Label names
      an existing statement, every Argument is within 1..nargs.
  (c) host rules: pluggable callables `rule(ir) -> Iterable[Defect]` for the
      control-flow shape the consumer expects. The defaults check for a
      final terminator and for phis at the head of a basic block.

Forward references (a value used before the statement defining it) are a
policy decision rather than a fixed rule; see ForwardRefPolicy.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .errors import InvalidIRError
from .ir import FunctionIR
from .nodes import Argument, Branch, Phi, Return, is_terminator, operands, references
from .variable import Label, Variable

logger = logging.getLogger(__name__)


class ForwardRefPolicy(Enum):
	"""
	Which value references may point at a later (or the same) statement.

	REJECT: none; every reference must strictly precede its use.
	PHI_REACHABLE: phi values may, when the defining statement is reachable
	  from the phi in the control-flow graph (loop-carried values).
	ALLOW: any reference to an existing statement is accepted.
	"""

	REJECT = "reject"
	PHI_REACHABLE = "phi-reachable"
	ALLOW = "allow"


@dataclass(frozen=True)
class Defect:
	"""One structural problem; `statement` is the offending use, if any."""

	code: str
	message: str
	statement: Optional[Variable] = None
	severity: str = "error"

	def __str__(self) -> str:
		where = f"{self.statement!r}: " if self.statement is not None else ""
		return f"{where}{self.severity}: {self.message} [{self.code}]"

	def to_dict(self) -> Dict[str, Any]:
		return {
			"code": self.code,
			"message": self.message,
			"statement": self.statement.id if self.statement is not None else None,
			"severity": self.severity,
		}


@dataclass
class ValidationReport:
	"""All defects found in one validation pass; truthy when there are none."""

	defects: List[Defect] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.defects

	def __bool__(self) -> bool:
		return self.ok

	def codes(self) -> List[str]:
		return [d.code for d in self.defects]

	def raise_for_defects(self) -> None:
		if self.defects:
			raise InvalidIRError(self)


HostRule = Callable[[FunctionIR], Iterable[Defect]]


# -- control-flow helpers -------------------------------------------------


def successors(ir: FunctionIR) -> Dict[int, List[int]]:
	"""
	Statement-level CFG: statement id -> ids control may pass to next.

	Return has no successors, an unconditional Branch goes to its target, a
	conditional Branch to its target and the next statement, anything else
	falls through. Targets outside the function are left out.
	"""
	n = len(ir.code)
	succ: Dict[int, List[int]] = {}
	for i, node in enumerate(ir.code, start=1):
		out: List[int] = []
		if isinstance(node, Return):
			pass
		elif isinstance(node, Branch):
			if 1 <= node.target.id <= n:
				out.append(node.target.id)
			if node.conditional and i < n:
				out.append(i + 1)
		elif i < n:
			out.append(i + 1)
		succ[i] = out
	return succ


def _reachable_from(succ: Dict[int, List[int]], start: int) -> Set[int]:
	"""Statements reachable from `start` along at least one edge."""
	seen: Set[int] = set()
	queue = deque(succ.get(start, ()))
	while queue:
		i = queue.popleft()
		if i in seen:
			continue
		seen.add(i)
		queue.extend(succ.get(i, ()))
	return seen


def block_leaders(ir: FunctionIR) -> Set[int]:
	"""First statement of every basic block."""
	n = len(ir.code)
	leaders: Set[int] = {1} if n else set()
	for i, node in enumerate(ir.code, start=1):
		if isinstance(node, Branch):
			if 1 <= node.target.id <= n:
				leaders.add(node.target.id)
			if i < n:
				leaders.add(i + 1)
		elif isinstance(node, Return) and i < n:
			leaders.add(i + 1)
	return leaders


# -- host rules -----------------------------------------------------------


def check_terminators(ir: FunctionIR) -> Iterator[Defect]:
	"""The body must end in a Return or an unconditional Branch."""
	if not ir.code:
		yield Defect("missing-terminator", "function body is empty")
		return
	last = ir.code[-1]
	if not is_terminator(last):
		yield Defect(
			"missing-terminator",
			f"last statement is {type(last).__name__}, expected Return or unconditional Branch",
			Variable(len(ir.code)),
		)


def check_phi_placement(ir: FunctionIR) -> Iterator[Defect]:
	"""Phis may only appear at the head of a basic block."""
	leaders = block_leaders(ir)
	in_head = False
	for i, node in enumerate(ir.code, start=1):
		if i in leaders:
			in_head = True
		if isinstance(node, Phi):
			if not in_head:
				yield Defect("misplaced-phi", "phi is not at the start of a basic block", Variable(i))
		else:
			in_head = False


DEFAULT_HOST_RULES: Tuple[HostRule, ...] = (check_terminators, check_phi_placement)


@dataclass(frozen=True)
class ValidationOptions:
	forward_refs: ForwardRefPolicy = ForwardRefPolicy.PHI_REACHABLE
	host_rules: Tuple[HostRule, ...] = DEFAULT_HOST_RULES


DEFAULT_OPTIONS = ValidationOptions()


# -- checks ---------------------------------------------------------------


def _check_locations(ir: FunctionIR) -> Iterator[Defect]:
	if not ir.linetable:
		yield Defect("empty-location-table", "line table is empty")
	if len(ir.locations) != len(ir.code):
		yield Defect(
			"location-length-mismatch",
			f"{len(ir.locations)} locations for {len(ir.code)} statements",
		)
	if not ir.linetable:
		return
	for i, loc in enumerate(ir.locations, start=1):
		if isinstance(loc, bool) or not isinstance(loc, int) or not 0 <= loc < len(ir.linetable):
			yield Defect(
				"location-out-of-range",
				f"location {loc!r} is outside the line table (0..{len(ir.linetable) - 1})",
				Variable(i) if i <= len(ir.code) else None,
			)


def _check_references(ir: FunctionIR, policy: ForwardRefPolicy) -> Iterator[Defect]:
	n = len(ir.code)
	succ: Optional[Dict[int, List[int]]] = None
	for i, node in enumerate(ir.code, start=1):
		use = Variable(i)
		reachable: Optional[Set[int]] = None
		for ref in references(node):
			if isinstance(ref, Label):
				if not 1 <= ref.id <= n:
					yield Defect("dangling-label", f"{ref!r} is not a statement", use)
				continue
			if not 1 <= ref.id <= n:
				yield Defect("dangling-reference", f"{ref!r} is not defined", use)
				continue
			if ref.id < i or policy is ForwardRefPolicy.ALLOW:
				continue
			if policy is ForwardRefPolicy.PHI_REACHABLE and isinstance(node, Phi):
				if reachable is None:
					if succ is None:
						succ = successors(ir)
					reachable = _reachable_from(succ, i)
				if ref.id in reachable:
					continue
				yield Defect(
					"forward-reference",
					f"phi value {ref!r} is not reachable from the phi",
					use,
				)
				continue
			yield Defect("forward-reference", f"{ref!r} is used before it is defined", use)
		args = [node] if isinstance(node, Argument) else [op for op in operands(node) if isinstance(op, Argument)]
		for arg in args:
			if not 1 <= arg.n <= ir.nargs:
				yield Defect(
					"argument-out-of-range",
					f"{arg!r} is outside 1..{ir.nargs}",
					use,
				)


def validate_code(ir: FunctionIR, options: Optional[ValidationOptions] = None) -> ValidationReport:
	"""Check `ir` and return every defect found."""
	options = options or DEFAULT_OPTIONS
	report = ValidationReport()
	report.defects.extend(_check_locations(ir))
	report.defects.extend(_check_references(ir, options.forward_refs))
	for rule in options.host_rules:
		report.defects.extend(rule(ir))
	if report.defects:
		logger.debug("%s: %d defect(s): %s", ir.name, len(report.defects), ", ".join(report.codes()))
	return report


def check_code(ir: FunctionIR, options: Optional[ValidationOptions] = None) -> FunctionIR:
	"""Validate `ir`, raising InvalidIRError on any defect; returns `ir`."""
	validate_code(ir, options).raise_for_defects()
	return ir


__all__ = [
	"DEFAULT_HOST_RULES",
	"DEFAULT_OPTIONS",
	"Defect",
	"ForwardRefPolicy",
	"HostRule",
	"ValidationOptions",
	"ValidationReport",
	"block_leaders",
	"check_code",
	"check_phi_placement",
	"check_terminators",
	"successors",
	"validate_code",
]
