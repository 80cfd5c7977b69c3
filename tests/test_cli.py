"""Tests for the encscore command line."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from typer.testing import CliRunner

from cli.app import app
from encscore import __version__

runner = CliRunner()


class TestCommands:
    """Test cases for the CLI commands."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_info(self, enc_file):
        result = runner.invoke(app, ["info", str(enc_file)])
        assert result.exit_code == 0
        assert "SCOW" in result.output
        assert "Piano" in result.output

    def test_measures(self, enc_file):
        result = runner.invoke(app, ["measures", str(enc_file)])
        assert result.exit_code == 0
        assert "Measure 1" in result.output
        assert "C4" in result.output

    def test_measure_out_of_range(self, enc_file):
        result = runner.invoke(app, ["measures", str(enc_file), "--measure", "5"])
        assert result.exit_code == 1
        assert "out of range" in result.output

    def test_blocks(self, enc_file):
        result = runner.invoke(app, ["blocks", str(enc_file), "--hex"])
        assert result.exit_code == 0
        assert "TK00" in result.output
        assert "MEAS" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["info", str(tmp_path / "missing.enc")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_file(self, tmp_path):
        bad = tmp_path / "bad.enc"
        bad.write_bytes(b"NOPE" + bytes(300))
        result = runner.invoke(app, ["info", str(bad)])
        assert result.exit_code == 1
        assert "Invalid Encore header" in result.output

    def test_verbose_flag(self, enc_file):
        result = runner.invoke(app, ["--verbose", "info", str(enc_file)])
        assert result.exit_code == 0
