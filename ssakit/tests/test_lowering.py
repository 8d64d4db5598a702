#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""code_info and the lowering service seam."""

import pytest

from ssakit import LoweringUnavailableError, code_info, register_lowering
from ssakit.lowering import registered_lowering
from ssakit.test_support import straight_line_ir


def _recording_service(calls):
	def service(fn, arg_types):
		calls.append((fn, arg_types))
		return straight_line_ir()

	return service


def test_without_a_service_lowering_is_unavailable():
	register_lowering(None)
	with pytest.raises(LoweringUnavailableError):
		code_info(len, int)


def test_registered_service_receives_arg_types():
	calls = []
	register_lowering(_recording_service(calls))
	ir = code_info(len, int, str)
	assert ir.name == "straight"
	code_info(len, (int, str))
	assert calls == [(len, (int, str)), (len, (int, str))]


def test_explicit_service_wins_over_registered():
	registered, explicit = [], []
	register_lowering(_recording_service(registered))
	code_info(abs, float, lowering=_recording_service(explicit))
	assert registered == []
	assert explicit == [(abs, (float,))]


def test_register_returns_previous_service():
	first = _recording_service([])
	register_lowering(first)
	assert register_lowering(None) is first
	assert registered_lowering() is None


def test_service_must_return_function_ir():
	with pytest.raises(TypeError):
		code_info(len, lowering=lambda fn, types: "not ir")
