from __future__ import annotations

import importlib
import signal

import pandas as pd
import pytest
from click.testing import CliRunner

from irfilter import __version__
from irfilter.cli import cli, main
from irfilter.cli.exit_codes import (
    EXIT_ERROR,
    EXIT_SIGINT,
    EXIT_SIGTERM,
    EXIT_USAGE,
    SignalInterrupt,
)


@pytest.mark.integration
def test_cli_version() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output == f"irfilter {__version__}\n"


@pytest.mark.integration
def test_cli_help_lists_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["-h"])
    assert result.exit_code == 0
    for command in ("run", "init-config", "validate"):
        assert command in result.output


@pytest.mark.integration
def test_cli_without_command_shows_help() -> None:
    result = CliRunner().invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage:" in result.output


@pytest.mark.integration
def test_cli_run(ir_input, tmp_path) -> None:
    out_dir = tmp_path / "out"
    result = CliRunner().invoke(
        cli, ["run", "-i", str(ir_input), "-o", str(out_dir), "-p", "s1", "--no-progress"]
    )
    assert result.exit_code == 0, result.output
    assert "Accepted:  1 fragments (2 rows)" in result.output
    assert "Discarded: 1 fragments (2 rows)" in result.output

    accepted = pd.read_csv(out_dir / "s1.accepted.tsv", sep="\t", dtype=str, keep_default_na=False)
    discarded = pd.read_csv(out_dir / "s1.discarded.tsv", sep="\t", dtype=str, keep_default_na=False)
    assert set(accepted["FRAGMENT"]) == {"good"}
    assert set(discarded["FRAGMENT"]) == {"half"}


@pytest.mark.integration
def test_cli_run_with_config(ir_input, tmp_path) -> None:
    out_dir = tmp_path / "configured"
    config = tmp_path / "irfilter.yaml"
    config.write_text(
        f"input_file: {ir_input}\n"
        f"output_dir: {out_dir}\n"
        "prefix: cfg\n"
        "runtime:\n  enable_progress: false\n"
        "output:\n  defaults:\n    reference: '*'\n"
    )
    result = CliRunner().invoke(cli, ["run", "-c", str(config)])
    assert result.exit_code == 0, result.output

    discarded = pd.read_csv(out_dir / "cfg.discarded.tsv", sep="\t", dtype=str, keep_default_na=False)
    assert discarded["REFERENCE"].tolist() == ["chr1", "*"]


@pytest.mark.integration
def test_cli_run_requires_input() -> None:
    result = CliRunner().invoke(cli, ["run", "--no-progress"])
    assert result.exit_code == EXIT_USAGE
    assert "needs an input file" in result.output


@pytest.mark.integration
def test_cli_run_config_without_input(tmp_path) -> None:
    config = tmp_path / "empty.yaml"
    config.write_text("prefix: nothing\n")
    result = CliRunner().invoke(cli, ["run", "-c", str(config), "--no-progress"])
    assert result.exit_code == EXIT_ERROR
    assert "input file is required" in result.output


@pytest.mark.integration
def test_cli_run_rejects_missing_file(tmp_path) -> None:
    result = CliRunner().invoke(cli, ["run", "-i", str(tmp_path / "missing.tsv")])
    assert result.exit_code == 2


@pytest.mark.integration
def test_cli_run_reports_malformed_input(tmp_path) -> None:
    bad = tmp_path / "bad.tsv"
    bad.write_text("READ_GROUP\tFRAGMENT\nRG1\tf1\n")
    result = CliRunner().invoke(cli, ["run", "-i", str(bad), "-o", str(tmp_path), "--no-progress"])
    assert result.exit_code == 1
    assert "missing column" in result.output


@pytest.mark.integration
def test_cli_init_config_stdout() -> None:
    result = CliRunner().invoke(cli, ["init-config", "--stdout"])
    assert result.exit_code == 0
    assert "irfilter Configuration File" in result.output
    assert "input_file:" in result.output


@pytest.mark.integration
def test_cli_init_config_writes_file(tmp_path) -> None:
    target = tmp_path / "generated.yaml"
    result = CliRunner().invoke(cli, ["init-config", "--output-file", str(target)])
    assert result.exit_code == 0
    assert target.exists()
    assert "output:" in target.read_text()


@pytest.mark.integration
def test_cli_validate() -> None:
    result = CliRunner().invoke(cli, ["validate"])
    assert result.exit_code == 0
    assert "All checks passed" in result.output


@pytest.mark.integration
def test_main_returns_exit_code(ir_input, tmp_path) -> None:
    code = main(["run", "-i", str(ir_input), "-o", str(tmp_path / "m"), "--no-progress"])
    assert code == 0
    assert main(["run", "-i", str(tmp_path / "missing.tsv")]) == EXIT_USAGE


@pytest.mark.integration
@pytest.mark.parametrize("signum, code", [(signal.SIGTERM, EXIT_SIGTERM), (signal.SIGINT, EXIT_SIGINT)])
def test_main_maps_signals_to_exit_codes(monkeypatch, signum, code) -> None:
    cli_main = importlib.import_module("irfilter.cli.main")

    def interrupted(argv):
        raise SignalInterrupt(signum)

    monkeypatch.setattr(signal, "signal", lambda *args: None)
    monkeypatch.setattr(cli_main, "cli", interrupted)
    assert main([]) == code


@pytest.mark.integration
def test_cli_run_include_supplementary(tmp_path) -> None:
    sam = tmp_path / "reads.sam"
    sam.write_text(
        "@HD\tVN:1.6\tSO:queryname\n@SQ\tSN:chr1\tLN:1000\n"
        "q1\t0\tchr1\t11\t60\t4M\t*\t0\t0\tACGT\tIIII\n"
        "q1\t2048\tchr1\t601\t60\t4M\t*\t0\t0\tTTTT\tIIII\n"
    )
    runner = CliRunner()
    base_args = ["run", "-i", str(sam), "--no-progress"]

    result = runner.invoke(cli, base_args + ["-o", str(tmp_path / "skip")])
    assert result.exit_code == 0, result.output
    assert "Accepted:  1 fragments (1 rows)" in result.output

    result = runner.invoke(cli, base_args + ["-o", str(tmp_path / "keep"), "--include-supplementary"])
    assert result.exit_code == 0, result.output
    assert "Discarded: 1 fragments (2 rows)" in result.output
