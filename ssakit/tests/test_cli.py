#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""`ssakit check` / `ssakit fmt` exit codes and diagnostics."""

import json
import logging

from ssakit.cli import main
from ssakit.test_support import LOOP_TEXT

BAD_TEXT = 'ir bad(x) {\n\tloc "bad.py":1\n\t%1 = $1\n\t%2 = call f(%1)\n}\n'


def _write(tmp_path, name, text):
	path = tmp_path / name
	path.write_text(text)
	return path


def test_check_valid_file(tmp_path, capsys):
	path = _write(tmp_path, "loop.ir", LOOP_TEXT)
	assert main(["check", str(path)]) == 0
	assert capsys.readouterr().err == ""


def test_check_reports_defects_on_stderr(tmp_path, capsys):
	path = _write(tmp_path, "bad.ir", BAD_TEXT)
	assert main(["check", str(path)]) == 1
	err = capsys.readouterr().err
	assert f"{path}:%2: error:" in err
	assert "[missing-terminator]" in err


def test_check_json_payload(tmp_path, capsys):
	good = _write(tmp_path, "loop.ir", LOOP_TEXT)
	bad = _write(tmp_path, "bad.ir", BAD_TEXT)
	broken = _write(tmp_path, "broken.ir", "ir broken( {\n")
	assert main(["check", "--json", str(good), str(bad), str(broken)]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	assert [d["code"] for d in payload["diagnostics"]] == ["missing-terminator", "syntax-error"]
	assert payload["diagnostics"][0]["statement"] == 2
	assert payload["diagnostics"][0]["file"] == str(bad)
	assert payload["diagnostics"][1]["line"] == 1


def test_forward_ref_policy_flag(tmp_path, capsys):
	path = _write(tmp_path, "loop.ir", LOOP_TEXT)
	assert main(["check", "--forward-refs", "reject", str(path)]) == 1
	assert "[forward-reference]" in capsys.readouterr().err
	assert main(["check", "--forward-refs", "allow", str(path)]) == 0


def test_forward_ref_policy_from_environment(tmp_path, monkeypatch):
	path = _write(tmp_path, "loop.ir", LOOP_TEXT)
	monkeypatch.setenv("SSAKIT_FORWARD_REFS", "reject")
	assert main(["check", str(path)]) == 1
	assert main(["check", "--forward-refs", "phi-reachable", str(path)]) == 0


def test_unknown_environment_policy_falls_back(tmp_path, monkeypatch, caplog):
	path = _write(tmp_path, "loop.ir", LOOP_TEXT)
	monkeypatch.setenv("SSAKIT_FORWARD_REFS", "sometimes")
	with caplog.at_level(logging.WARNING, logger="ssakit.cli"):
		assert main(["check", str(path)]) == 0
	assert "SSAKIT_FORWARD_REFS" in caplog.text


def test_fmt_prints_normalized_text(tmp_path, capsys):
	path = _write(tmp_path, "loop.ir", LOOP_TEXT.replace("\t", "    "))
	assert main(["fmt", str(path)]) == 0
	assert capsys.readouterr().out == LOOP_TEXT


def test_fmt_syntax_error(tmp_path, capsys):
	path = _write(tmp_path, "broken.ir", "ir broken( {\n")
	assert main(["fmt", str(path)]) == 1
	assert "error:" in capsys.readouterr().err


def test_unreadable_file_is_a_diagnostic(tmp_path, capsys):
	missing = tmp_path / "missing.ir"
	assert main(["check", "--json", str(missing)]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert [d["code"] for d in payload["diagnostics"]] == ["io-error"]
	assert payload["diagnostics"][0]["file"] == str(missing)
	assert main(["fmt", str(missing)]) == 1
	assert f"{missing}: error:" in capsys.readouterr().err
