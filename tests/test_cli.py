#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Copyright (c) 2026 Melek Derman
#
# SPDX-License-Identifier: MIT
# -----------------------------------------------------------------------------

"""
Tests for the pycobrems command-line interface
"""

from __future__ import annotations

import pytest

from pycobrems.cli import build_parser, main


class TestParser:
    """Test option parsing"""

    def test_defaults(self) -> None:
        args = build_parser().parse_args(["info"])
        assert args.energy == 12.0
        assert args.edge == 9.0
        assert args.crystal == "diamond"
        assert args.ms_model == "pdg"
        assert args.uncollimated is False

    def test_spectrum_options(self) -> None:
        args = build_parser().parse_args(
            ["--polarized", "spectrum", "--points", "5", "-o", "out.h5", "--no-convolve"]
        )
        assert args.polarized is True
        assert args.points == 5
        assert args.output == "out.h5"
        assert args.no_convolve is True

    def test_rejects_unknown_crystal(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--crystal", "sapphire", "info"])

    def test_rejects_unknown_model(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--ms-model", "moliere", "info"])


class TestMain:
    """Test command execution and exit codes"""

    def test_no_command(self, capsys) -> None:
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_info(self, capsys) -> None:
        assert main(["info"]) == 0
        out = capsys.readouterr().out
        assert "Target crystal: diamond" in out
        assert "radiation length PDG" in out
        assert "sigma2 MS hanson" in out

    def test_info_silicon(self, capsys) -> None:
        assert main(["--crystal", "silicon", "--edge", "3", "info"]) == 0
        assert "Target crystal: silicon" in capsys.readouterr().out

    def test_invalid_edge(self, capsys) -> None:
        assert main(["--edge", "13", "info"]) == 1
        assert "FAIL" in capsys.readouterr().out

    def test_spectrum_table(self, capsys) -> None:
        rc = main(["spectrum", "--points", "5", "--x-min", "0.6", "--x-max", "0.8"])
        assert rc == 0
        lines = capsys.readouterr().out.splitlines()
        assert "convolved/dNtdx" in lines[0]
        rows = [line for line in lines[1:] if line.strip() and "Completed" not in line]
        assert len(rows) == 5

    def test_spectrum_hdf5(self, tmp_path, capsys) -> None:
        pytest.importorskip("h5py")
        out = tmp_path / "cli.h5"
        assert main(["spectrum", "--points", "3", "--output", str(out)]) == 0
        assert out.exists()
        assert "OK" in capsys.readouterr().out

    def test_spectrum_existing_file(self, tmp_path, capsys) -> None:
        pytest.importorskip("h5py")
        out = tmp_path / "cli.h5"
        assert main(["spectrum", "--points", "3", "-o", str(out)]) == 0
        assert main(["spectrum", "--points", "3", "-o", str(out)]) == 1
        assert main(["spectrum", "--points", "3", "-o", str(out), "--overwrite"]) == 0
