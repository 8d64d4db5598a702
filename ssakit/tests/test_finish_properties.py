#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Properties of finish:
  - identity: iterating without edits reproduces the source exactly
  - renumbering of retained source statements is injective and order preserving
  - deleted statements never reach the output
  - inserted statements land before their anchor
  - validating the output reports exactly the defects the edits introduced
  - replacing one call leaves every other statement untouched
"""

import operator

from ssakit import (
	Argument,
	Builder,
	Call,
	Const,
	GlobalRef,
	Return,
	Variable,
	finish,
	validate_code,
)
from ssakit.test_support import counting_loop_ir, make_ir, straight_line_ir


def _f(x):
	return x


def _g(x):
	return -x


def test_identity_round_trip():
	for ir in (straight_line_ir(), counting_loop_ir()):
		b = Builder(ir)
		for _ in b:
			pass
		out = finish(b)
		assert out is not ir
		assert out == ir
		assert out.locations == ir.locations
		assert out.types == ir.types
		assert out.linetable == ir.linetable
		assert (out.name, out.nargs, out.slotnames) == (ir.name, ir.nargs, ir.slotnames)
		assert dict(out.metadata) == dict(ir.metadata)
		assert b.renumbering == {v: v for v in ir.variables()}


def _edit_straight_line():
	ir = straight_line_ir()
	b = Builder(ir)
	for v, st in b:
		if v == Variable(2):
			del b[v]
		elif v == Variable(4):
			b.insert_before(v, Const(0))
	return ir, b, finish(b)


def test_renumbering_is_injective_and_order_preserving():
	_, b, _ = _edit_straight_line()
	assert Variable(2) not in b.renumbering
	assert b.renumbering == {
		Variable(1): Variable(1),
		Variable(3): Variable(2),
		Variable(4): Variable(4),
		Variable(5): Variable(5),
	}
	targets = [b.renumbering[src].id for src in sorted(b.renumbering, key=lambda v: v.id)]
	assert targets == sorted(set(targets))


def test_deleted_statements_are_excluded_and_inserts_precede_anchor():
	_, _, out = _edit_straight_line()
	assert Const(42) not in out.code
	assert out.code == (
		Argument(1),
		Call(operator.add, (Variable(1), 1)),
		Const(0),
		Call(operator.add, (Variable(2), Variable(1))),
		Return(Variable(4)),
	)
	assert len(out.locations) == len(out.code)


def test_integrity_preserving_edits_validate_cleanly():
	_, _, out = _edit_straight_line()
	assert validate_code(out).ok
	assert validate_code(finish(_rebuild(out))).ok


def _rebuild(ir):
	b = Builder(ir)
	for _ in b:
		pass
	return b


def test_validation_reports_exactly_the_introduced_defect():
	ir = straight_line_ir()
	assert validate_code(ir).ok
	b = Builder(ir)
	for v, _ in b:
		if v == Variable(3):
			del b[v]
	report = validate_code(finish(b))
	assert report.codes() == ["dangling-reference"]
	assert report.defects[0].statement == Variable(3)


def test_replacing_one_call_keeps_the_rest():
	ns = {"f": _f, "g": _g}
	ir = make_ir([Argument(1), Call(GlobalRef(ns, "f"), (Variable(1),)), Return(Variable(2))])
	b = Builder(ir)
	for v, st in b:
		if isinstance(st.node, Call) and st.node.callee is _f:
			b[v] = Call(_g, st.node.args)
	out = finish(b)
	assert len(out.code) == 3
	assert len(out.locations) == 3
	assert out.code[0] == ir.code[0]
	assert out.code[2] == ir.code[2]
	assert out.code[1] == Call(_g, (Variable(1),))
	assert validate_code(out).ok
