# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
ssakit: build and rewrite SSA-form lowered function bodies.

Pieces, leaf first:
  variable  Variable / Label handles
  nodes     closed node-kind set, Statement, reference walkers
  ir        FunctionIR, the value going in and coming out
  canvas    mutable statement buffer with stable ids and renumbering
  builder   co-iteration over a source IR, `finish`
  validate  structural checks collecting every defect
  lowering  seam to the host's lowering service (`code_info`)
  text      textual form (`parse_ir` / `format_ir`)
"""

from .variable import DANGLING_ID, Label, Variable, label, var
from .nodes import (
	UNKNOWN,
	Argument,
	Branch,
	Call,
	Const,
	GlobalRef,
	Phi,
	Return,
	Statement,
	bind_callee,
	is_terminator,
	map_references,
	operands,
	references,
	resolve_global,
)
from .ir import FunctionIR, LineInfo
from .canvas import Canvas, DanglingReference, Renumbering
from .validate import (
	DEFAULT_HOST_RULES,
	Defect,
	ForwardRefPolicy,
	ValidationOptions,
	ValidationReport,
	check_code,
	validate_code,
)
from .builder import Builder, BuilderState, finish
from .lowering import code_info, register_lowering
from .errors import (
	DanglingReferenceError,
	EmptyLocationTableError,
	IRError,
	IRSyntaxError,
	IndexOutOfRangeError,
	InvalidIRError,
	LoweringUnavailableError,
	ReentrantIterationError,
	UnboundGlobalError,
	UseAfterFinishError,
)
from .text import format_ir, parse_ir

__version__ = "0.1.0"

__all__ = [
	"Argument",
	"Branch",
	"Builder",
	"BuilderState",
	"Call",
	"Canvas",
	"Const",
	"DANGLING_ID",
	"DEFAULT_HOST_RULES",
	"DanglingReference",
	"DanglingReferenceError",
	"Defect",
	"EmptyLocationTableError",
	"ForwardRefPolicy",
	"FunctionIR",
	"GlobalRef",
	"IRError",
	"IRSyntaxError",
	"IndexOutOfRangeError",
	"InvalidIRError",
	"Label",
	"LineInfo",
	"LoweringUnavailableError",
	"Phi",
	"ReentrantIterationError",
	"Renumbering",
	"Return",
	"Statement",
	"UNKNOWN",
	"UnboundGlobalError",
	"UseAfterFinishError",
	"ValidationOptions",
	"ValidationReport",
	"Variable",
	"bind_callee",
	"check_code",
	"code_info",
	"finish",
	"format_ir",
	"is_terminator",
	"label",
	"map_references",
	"operands",
	"parse_ir",
	"references",
	"register_lowering",
	"resolve_global",
	"validate_code",
	"var",
]
