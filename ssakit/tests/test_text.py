#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Textual IR: reading, printing, and the errors the reader reports."""

import math
import operator

import pytest

from ssakit import (
	Argument,
	Builder,
	Call,
	Const,
	GlobalRef,
	IRSyntaxError,
	LineInfo,
	Return,
	Variable,
	finish,
	format_ir,
	parse_ir,
	validate_code,
)
from ssakit.test_support import LOOP_TEXT, counting_loop_ir, make_ir

FULL_TEXT = (
	'ir "my fn"(self, x) {\n'
	'\tloc "a.py":3 in demo\n'
	'\tloc "":0\n'
	"\t%1 = $2 :: Int\n"
	'\t%2 = call f(%1, -1, 2.5, "s", true, false, none) @1\n'
	"\t%3 = g\n"
	"\t%4 = br #6 unless %2\n"
	'\t%5 = return "done"\n'
	"\t%6 = return %1 :: Int @1\n"
	"}\n"
)


def test_parse_loop():
	ns = {"lt": operator.lt, "add": operator.add}
	ir = parse_ir(LOOP_TEXT, ns)
	assert ir.name == "count"
	assert ir.nargs == 1
	assert ir.slotnames == ("n",)
	assert ir.linetable == (LineInfo("count.py", 1, "count"),)
	assert ir.code[2] == Call(GlobalRef(ns, "lt"), (Variable(2), Variable(1)))
	assert validate_code(ir).ok


def test_building_parsed_ir_binds_callees():
	ns = {"lt": operator.lt, "add": operator.add}
	b = Builder(parse_ir(LOOP_TEXT, ns))
	for _ in b:
		pass
	assert finish(b).code == counting_loop_ir().code


def test_parse_every_form():
	ns = {}
	ir = parse_ir(FULL_TEXT, ns)
	assert ir.name == "my fn"
	assert ir.slotnames == ("self", "x")
	assert ir.nargs == 2
	assert ir.linetable == (LineInfo("a.py", 3, "demo"), LineInfo(None, 0, None))
	assert ir.code[0] == Argument(2)
	assert ir.types[0] == "Int"
	assert ir.code[1] == Call(GlobalRef(ns, "f"), (Variable(1), -1, 2.5, "s", True, False, None))
	assert ir.locations == (0, 1, 0, 0, 0, 1)
	assert ir.code[2] == GlobalRef(ns, "g")
	assert ir.code[4] == Return("done")


def test_format_is_the_inverse_of_parse():
	ns = {}
	ir = parse_ir(FULL_TEXT, ns)
	assert format_ir(ir) == FULL_TEXT
	assert parse_ir(format_ir(ir), ns) == ir
	assert format_ir(parse_ir(LOOP_TEXT)) == LOOP_TEXT


def test_non_finite_floats_survive_the_text_form():
	ir = make_ir([Const(math.inf), Call(GlobalRef({}, "f"), (-math.inf, math.nan)), Return(Variable(1))])
	text = format_ir(ir)
	assert "%1 = inf\n" in text
	assert "call f(-inf, nan)" in text
	back = parse_ir(text)
	assert back.code[0] == Const(math.inf)
	assert back.code[1].args[0] == -math.inf
	assert math.isnan(back.code[1].args[1])
	assert format_ir(back) == text


def test_bound_callees_print_by_qualname():
	text = format_ir(counting_loop_ir())
	assert "%3 = call <lt>(%2, %1) :: Bool @1" in text


def test_comments_are_ignored():
	ir = parse_ir('; leading\nir f() { ; trailing\n\tloc "x":1\n\t%1 = return none ; done\n}\n')
	assert ir.code == (Return(None),)


def test_statements_must_be_numbered_in_order():
	with pytest.raises(IRSyntaxError) as exc:
		parse_ir('ir f() {\n\tloc "x":1\n\t%2 = return none\n}\n')
	assert exc.value.line == 3


def test_malformed_input_reports_position():
	with pytest.raises(IRSyntaxError) as exc:
		parse_ir("ir f( {\n}\n")
	assert exc.value.line == 1
	assert isinstance(exc.value, ValueError)


def test_branch_condition_cannot_be_none():
	with pytest.raises(IRSyntaxError):
		parse_ir('ir f() {\n\tloc "x":1\n\t%1 = br #1 unless none\n}\n')
