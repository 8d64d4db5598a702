# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reader for the textual IR form (see grammar.lark).

The lark parse tree is walked by hand into FunctionIR; bare names become
GlobalRefs into the namespace the caller passes, so the same text can be
bound against different environments.
"""

from __future__ import annotations

import ast
import math
from pathlib import Path
from typing import Any, List, Mapping, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from ..errors import IRSyntaxError
from ..ir import FunctionIR, LineInfo
from ..nodes import UNKNOWN, Argument, Branch, Call, Const, GlobalRef, Phi, Return
from ..variable import Label, Variable

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="function",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_ir(source: str, namespace: Optional[Mapping[str, Any]] = None) -> FunctionIR:
	"""
	Parse textual IR into a FunctionIR.

	`namespace` is the mapping bare names are looked up in (lazily, through
	GlobalRef); it defaults to an empty dict.
	"""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as exc:
		raise IRSyntaxError(f"unexpected input: {exc.get_context(source).strip()}", line=exc.line, column=exc.column) from None
	return _Builder({} if namespace is None else namespace).build(tree)


def _name(tree: Tree) -> str:
	return tree.data if isinstance(tree.data, str) else tree.data.value


def _text(tok: Token) -> str:
	if tok.type == "STRING":
		return ast.literal_eval(tok.value)
	return tok.value


def _loc_error(message: str, node: Tree | Token) -> IRSyntaxError:
	line = getattr(node, "line", None)
	column = getattr(node, "column", None)
	if isinstance(node, Tree) and node.meta and not node.meta.empty:
		line, column = node.meta.line, node.meta.column
	return IRSyntaxError(message, line=line, column=column)


class _Builder:
	def __init__(self, namespace: Mapping[str, Any]):
		self.namespace = namespace

	def build(self, tree: Tree) -> FunctionIR:
		children = list(tree.children)
		name = _text(children.pop(0))
		slotnames: List[str] = []
		linetable: List[LineInfo] = []
		code = []
		types = []
		locations: List[int] = []
		for child in children:
			kind = _name(child)
			if kind == "slot_list":
				slotnames = [_text(tok) for tok in child.children]
			elif kind == "loc_decl":
				linetable.append(self._loc_decl(child))
			elif kind == "stmt":
				var_tok = child.children[0]
				expected = len(code) + 1
				if int(var_tok.value[1:]) != expected:
					raise _loc_error(f"expected %{expected}, found {var_tok.value}", var_tok)
				node, typ, loc = self._stmt(child)
				code.append(node)
				types.append(typ)
				locations.append(loc)
		return FunctionIR(
			code=tuple(code),
			locations=tuple(locations),
			linetable=tuple(linetable),
			types=tuple(types),
			name=name,
			nargs=len(slotnames),
			slotnames=tuple(slotnames),
		)

	def _loc_decl(self, tree: Tree) -> LineInfo:
		file_tok, line_tok, *rest = tree.children
		function = _text(rest[0]) if rest else None
		return LineInfo(file=_text(file_tok) or None, line=int(line_tok.value), function=function)

	def _stmt(self, tree: Tree):
		_, node_tree, *extras = tree.children
		typ: Any = UNKNOWN
		loc = 0
		for extra in extras:
			if _name(extra) == "type_ann":
				typ = _text(extra.children[0])
			elif _name(extra) == "loc_ref":
				loc = int(extra.children[0].value)
		return self._node(node_tree), typ, loc

	def _node(self, tree: Tree):
		kind = _name(tree)
		if kind == "call":
			callee, *args = (self._operand(c) for c in tree.children)
			return Call(callee, tuple(args))
		if kind == "branch":
			target = _label(tree.children[0])
			cond = self._operand(tree.children[1]) if len(tree.children) > 1 else None
			if len(tree.children) > 1 and cond is None:
				raise _loc_error("branch condition cannot be `none`", tree)
			return Branch(target, cond)
		if kind == "ret":
			return Return(self._operand(tree.children[0]))
		if kind == "phi":
			return Phi(tuple((_label(e.children[0]), self._operand(e.children[1])) for e in tree.children))
		if kind == "arg_node":
			return _argument(tree.children[0])
		if kind == "global_node":
			return GlobalRef(self.namespace, tree.children[0].value)
		if kind == "const_node":
			return Const(self._operand(tree.children[0]))
		raise _loc_error(f"unknown statement form {kind!r}", tree)

	def _operand(self, tree: Tree) -> Any:
		kind = _name(tree)
		if kind == "var_op":
			return Variable(int(tree.children[0].value[1:]))
		if kind == "arg_op":
			return _argument(tree.children[0])
		if kind == "global_op":
			return GlobalRef(self.namespace, tree.children[0].value)
		if kind == "number":
			text = tree.children[0].value
			try:
				return int(text)
			except ValueError:
				return float(text)
		if kind == "string":
			return _text(tree.children[0])
		if kind == "true":
			return True
		if kind == "false":
			return False
		if kind == "none":
			return None
		if kind == "inf":
			return math.inf
		if kind == "neg_inf":
			return -math.inf
		if kind == "nan":
			return math.nan
		raise _loc_error(f"unknown operand form {kind!r}", tree)


def _label(tok: Token) -> Label:
	return Label(int(tok.value[1:]))


def _argument(tok: Token) -> Argument:
	return Argument(int(tok.value[1:]))


__all__ = ["parse_ir"]
