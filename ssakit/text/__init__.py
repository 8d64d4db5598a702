# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Textual IR: `parse_ir` reads it, `format_ir` writes it.

Used by the CLI and by tests to spell out function bodies compactly.
"""

from .parser import parse_ir
from .printer import format_ir, format_node, format_operand

__all__ = ["format_ir", "format_node", "format_operand", "parse_ir"]
