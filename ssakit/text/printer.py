# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Printer for the textual IR form; the inverse of `parse_ir`.

Callees that were bound eagerly to Python objects print as `<qualname>`,
which is readable but does not parse back.
"""

from __future__ import annotations

import json
import math
from typing import Any, List

from ..ir import FunctionIR, LineInfo
from ..nodes import UNKNOWN, Argument, Branch, Call, Const, GlobalRef, Node, Phi, Return
from ..variable import Label, Variable

_KEYWORDS = {"ir", "loc", "in", "call", "br", "unless", "return", "phi", "true", "false", "none", "inf", "nan"}


def _name(text: str) -> str:
	if text.isidentifier() and text.isascii() and text not in _KEYWORDS:
		return text
	return json.dumps(text)


def format_operand(value: Any) -> str:
	if isinstance(value, (Variable, Label, Argument)):
		return repr(value)
	if isinstance(value, GlobalRef):
		return _name(value.name)
	if value is None:
		return "none"
	if isinstance(value, bool):
		return "true" if value else "false"
	if isinstance(value, float) and not math.isfinite(value):
		if math.isnan(value):
			return "nan"
		return "inf" if value > 0 else "-inf"
	if isinstance(value, (int, float)):
		return repr(value)
	if isinstance(value, str):
		return json.dumps(value)
	qualname = getattr(value, "__qualname__", None)
	if qualname is not None:
		return f"<{qualname}>"
	return f"<{value!r}>"


def format_node(node: Node) -> str:
	if isinstance(node, Call):
		args = ", ".join(format_operand(a) for a in node.args)
		return f"call {format_operand(node.callee)}({args})"
	if isinstance(node, Branch):
		if node.conditional:
			return f"br {node.target!r} unless {format_operand(node.cond)}"
		return f"br {node.target!r}"
	if isinstance(node, Return):
		return f"return {format_operand(node.value)}"
	if isinstance(node, Phi):
		edges = ", ".join(f"{edge!r} => {format_operand(value)}" for edge, value in node.incoming)
		return f"phi [{edges}]"
	if isinstance(node, Const):
		return format_operand(node.value)
	if isinstance(node, (GlobalRef, Argument)):
		return format_operand(node)
	raise TypeError(f"not an IR node: {node!r}")


def _format_line(info: LineInfo) -> str:
	text = f"loc {json.dumps(info.file or '')}:{info.line}"
	if info.function:
		text += f" in {_name(info.function)}"
	return text


def format_ir(ir: FunctionIR) -> str:
	slots = ", ".join(_name(s) for s in ir.slotnames)
	lines: List[str] = [f"ir {_name(ir.name)}({slots}) {{"]
	for info in ir.linetable:
		lines.append(f"\t{_format_line(info)}")
	for i, node in enumerate(ir.code):
		text = f"\t%{i + 1} = {format_node(node)}"
		typ = ir.types[i]
		if typ is not UNKNOWN:
			type_name = typ if isinstance(typ, str) else getattr(typ, "__qualname__", repr(typ))
			text += f" :: {_name(type_name)}"
		loc = ir.locations[i] if i < len(ir.locations) else 0
		if loc:
			text += f" @{loc}"
		lines.append(text)
	lines.append("}")
	return "\n".join(lines) + "\n"


__all__ = ["format_ir", "format_node", "format_operand"]
