# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line front end: `python -m ssakit`.

  check FILE...   parse and validate textual IR; exit 1 on any defect
  fmt FILE        print the normalized textual form

With --json, `check` prints one payload `{"exit_code": .., "diagnostics": [..]}`
instead of human-readable lines on stderr. The default forward-reference
policy can be set with SSAKIT_FORWARD_REFS (reject, phi-reachable, allow).
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

from .errors import IRSyntaxError
from .text import format_ir, parse_ir
from .validate import ForwardRefPolicy, ValidationOptions, validate_code

logger = logging.getLogger(__name__)


def _default_policy() -> ForwardRefPolicy:
	raw = os.environ.get("SSAKIT_FORWARD_REFS")
	if not raw:
		return ForwardRefPolicy.PHI_REACHABLE
	try:
		return ForwardRefPolicy(raw)
	except ValueError:
		logger.warning("ignoring unknown SSAKIT_FORWARD_REFS=%r", raw)
		return ForwardRefPolicy.PHI_REACHABLE


def _diag(path: Path, message: str, *, code: str, statement: int | None = None, line: int | None = None) -> Dict[str, Any]:
	return {
		"file": str(path),
		"code": code,
		"message": message,
		"severity": "error",
		"statement": statement,
		"line": line,
	}


def _check(paths: List[Path], options: ValidationOptions, as_json: bool) -> int:
	diagnostics: List[Dict[str, Any]] = []
	for path in paths:
		try:
			ir = parse_ir(path.read_text())
		except OSError as exc:
			diagnostics.append(_diag(path, exc.strerror or str(exc), code="io-error"))
			continue
		except IRSyntaxError as exc:
			diagnostics.append(_diag(path, str(exc), code="syntax-error", line=exc.line))
			continue
		report = validate_code(ir, options)
		for defect in report.defects:
			d = defect.to_dict()
			diagnostics.append(_diag(path, d["message"], code=d["code"], statement=d["statement"]))
	exit_code = 1 if diagnostics else 0
	if as_json:
		print(json.dumps({"exit_code": exit_code, "diagnostics": diagnostics}))
	else:
		for d in diagnostics:
			where = f"%{d['statement']}" if d["statement"] is not None else (d["line"] or "?")
			print(f"{d['file']}:{where}: error: {d['message']} [{d['code']}]", file=sys.stderr)
	return exit_code


def _fmt(path: Path) -> int:
	try:
		ir = parse_ir(path.read_text())
	except OSError as exc:
		print(f"{path}: error: {exc.strerror or exc}", file=sys.stderr)
		return 1
	except IRSyntaxError as exc:
		print(f"{path}:{exc.line or '?'}: error: {exc}", file=sys.stderr)
		return 1
	sys.stdout.write(format_ir(ir))
	return 0


def main(argv: list[str] | None = None) -> int:
	parser = argparse.ArgumentParser(prog="ssakit", description="Inspect and validate textual SSA IR")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	sub = parser.add_subparsers(dest="command", required=True)

	check = sub.add_parser("check", help="Validate IR files")
	check.add_argument("files", type=Path, nargs="+", help="Path(s) to textual IR files")
	check.add_argument(
		"--forward-refs",
		choices=[p.value for p in ForwardRefPolicy],
		default=None,
		help="Forward reference policy (default: $SSAKIT_FORWARD_REFS or phi-reachable)",
	)
	check.add_argument("--json", action="store_true", help="Emit diagnostics as JSON")

	fmt = sub.add_parser("fmt", help="Print the normalized form of an IR file")
	fmt.add_argument("file", type=Path)

	args = parser.parse_args(argv)
	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

	if args.command == "check":
		policy = ForwardRefPolicy(args.forward_refs) if args.forward_refs else _default_policy()
		return _check(list(args.files), ValidationOptions(forward_refs=policy), args.json)
	return _fmt(args.file)


__all__ = ["main"]
