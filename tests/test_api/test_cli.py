"""Tests for the command line entry point."""

import sys

import pytest

from coverage_engine.__main__ import main


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["coverage_engine", *args])
    main()


class TestCli:
    def test_default_alignment(self, monkeypatch, capsys):
        run_cli(monkeypatch)
        out = capsys.readouterr().out
        assert out.startswith("Cover 3 vs")
        assert "Validation: valid" in out
        assert "FS" in out

    def test_motion(self, monkeypatch, capsys):
        run_cli(monkeypatch, "--coverage", "cover_2", "--motion", "fly", "--mover", "X")
        out = capsys.readouterr().out
        assert "fly motion by X: bump" in out

    def test_unknown_coverage_exits(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli(monkeypatch, "--coverage", "cover-9")
        assert exc.value.code == 2
        assert "Unknown coverage" in capsys.readouterr().err

    def test_unknown_mover_exits(self, monkeypatch):
        with pytest.raises(SystemExit):
            run_cli(monkeypatch, "--motion", "jet", "--mover", "WR9")
