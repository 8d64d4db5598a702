# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Seam to the host's lowering service.

ssakit does not lower functions itself. A host (a frontend, a reflection
layer, a test) provides a callable `service(fn, arg_types) -> FunctionIR`,
either per call or registered once as the default. `code_info` is the only
place that calls it, and nothing in the core ever calls back into it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Tuple

from .errors import LoweringUnavailableError
from .ir import FunctionIR

logger = logging.getLogger(__name__)

LoweringService = Callable[[Any, Tuple[Any, ...]], FunctionIR]

_default_lowering: Optional[LoweringService] = None


def register_lowering(service: Optional[LoweringService]) -> Optional[LoweringService]:
	"""Install the default lowering service (None clears it); returns the previous one."""
	global _default_lowering
	previous = _default_lowering
	_default_lowering = service
	return previous


def registered_lowering() -> Optional[LoweringService]:
	return _default_lowering


def code_info(fn: Any, *arg_types: Any, lowering: Optional[LoweringService] = None) -> FunctionIR:
	"""
	Lowered IR of `fn` specialized on `arg_types`.

	Argument types may be given as varargs (`code_info(f, int, str)`) or as a
	single tuple (`code_info(f, (int, str))`).
	"""
	if len(arg_types) == 1 and isinstance(arg_types[0], tuple):
		arg_types = arg_types[0]
	service = lowering or _default_lowering
	if service is None:
		raise LoweringUnavailableError("no lowering service supplied or registered")
	name = getattr(fn, "__qualname__", repr(fn))
	logger.debug("lowering %s%r", name, arg_types)
	ir = service(fn, tuple(arg_types))
	if not isinstance(ir, FunctionIR):
		raise TypeError(f"lowering service returned {type(ir).__name__}, expected FunctionIR")
	return ir


__all__ = ["LoweringService", "code_info", "register_lowering", "registered_lowering"]
