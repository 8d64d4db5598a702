# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import pytest

from ssakit import lowering


@pytest.fixture(autouse=True)
def _isolate_lowering_registry():
	"""
	Tests may register a default lowering service; restore whatever was there
	so registrations never leak between tests.
	"""
	previous = lowering.registered_lowering()
	yield
	lowering.register_lowering(previous)
