# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared IR fixtures for tests.

Spelling FunctionIR out by hand is noisy (locations, line table, types); these
helpers fill in the boring parts so tests can focus on the statements.
"""

from __future__ import annotations

import operator
from typing import Any, Mapping, Sequence

from ssakit import Argument, Branch, Call, Const, FunctionIR, Label, LineInfo, Phi, Return, Variable


def make_ir(
	code: Sequence[Any],
	*,
	nargs: int = 1,
	name: str = "f",
	locations: Sequence[int] | None = None,
	linetable: Sequence[LineInfo] | None = None,
	types: Sequence[Any] = (),
	metadata: Mapping[str, Any] | None = None,
) -> FunctionIR:
	"""FunctionIR with one line-table entry and every statement at location 0 unless given."""
	code = tuple(code)
	return FunctionIR(
		code=code,
		locations=tuple(locations) if locations is not None else (0,) * len(code),
		linetable=tuple(linetable) if linetable is not None else (LineInfo("test.py", 1, name),),
		types=tuple(types),
		name=name,
		nargs=nargs,
		slotnames=tuple(f"a{i}" for i in range(1, nargs + 1)),
		metadata=metadata or {},
	)


def straight_line_ir() -> FunctionIR:
	"""
	%1 = $1
	%2 = 42              (dead)
	%3 = add(%1, 1)
	%4 = add(%3, %1)
	%5 = return %4
	"""
	return make_ir(
		[
			Argument(1),
			Const(42),
			Call(operator.add, (Variable(1), 1)),
			Call(operator.add, (Variable(3), Variable(1))),
			Return(Variable(4)),
		],
		name="straight",
	)


def counting_loop_ir() -> FunctionIR:
	"""
	%1 = $1
	%2 = phi [#1 => 0, #6 => %5]
	%3 = lt(%2, %1)
	%4 = br #7 unless %3
	%5 = add(%2, 1)
	%6 = br #2
	%7 = return %2
	"""
	return FunctionIR(
		code=(
			Argument(1),
			Phi(((Label(1), 0), (Label(6), Variable(5)))),
			Call(operator.lt, (Variable(2), Variable(1))),
			Branch(Label(7), Variable(3)),
			Call(operator.add, (Variable(2), 1)),
			Branch(Label(2)),
			Return(Variable(2)),
		),
		locations=(0, 1, 1, 1, 2, 2, 3),
		linetable=(
			LineInfo("count.py", 1, "count"),
			LineInfo("count.py", 2, "count"),
			LineInfo("count.py", 3, "count"),
			LineInfo("count.py", 4, "count"),
		),
		types=("Int", "Int", "Bool", "Any", "Int", "Any", "Int"),
		name="count",
		nargs=1,
		slotnames=("n",),
		metadata={"inferred": False},
	)


LOOP_TEXT = """\
ir count(n) {
	loc "count.py":1 in count
	%1 = $1
	%2 = phi [#1 => 0, #6 => %5]
	%3 = call lt(%2, %1)
	%4 = br #7 unless %3
	%5 = call add(%2, 1)
	%6 = br #2
	%7 = return %2
}
"""


__all__ = ["LOOP_TEXT", "counting_loop_ir", "make_ir", "straight_line_ir"]
