import argparse
import json

import pytest

from testbed.checks import CHECKS
from testbed.cli import EXIT_PASS, EXIT_VIOLATION, build_config, build_parser, load_capability, main

SMALL_CONFIG = (
    "simulated_infinity: 20\n"
    "repetitions: 2\n"
    "random_strength: 10\n"
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "testbed.yaml"
    path.write_text(SMALL_CONFIG)
    return path


def test_load_capability():
    from capabilities import TransitionTable

    assert load_capability("capabilities:TransitionTable") is TransitionTable


def test_load_capability_rejects_bad_paths():
    with pytest.raises(ValueError):
        load_capability("capabilities")
    with pytest.raises(TypeError):
        load_capability("json:dumps")


def test_list_prints_every_check(capsys):
    assert main(["list"]) == EXIT_PASS

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == [check.title for check in CHECKS]


def test_run_passes_selected_checks(config_file, capsys):
    code = main([
        "run", "capabilities:TransitionTable",
        "--config", str(config_file),
        "--seed", "5",
        "--sequence-length", "3",
        "--check", "Genesis",
        "--check", "Determinism",
        "--json-output",
    ])

    assert code == EXIT_PASS
    summary = json.loads(capsys.readouterr().out)
    assert summary["status"] == "PASS"
    assert summary["difficulty"] == 3
    assert [check["name"] for check in summary["checks"]] == ["Genesis", "Determinism"]
    assert all(check["repetitions"] == 2 for check in summary["checks"])


def test_run_reports_violation(config_file, capsys):
    code = main([
        "run", "capabilities:ConstantCapability",
        "--config", str(config_file),
        "--seed", "5",
        "--sequence-length", "2",
        "--json-output",
    ])

    assert code == EXIT_VIOLATION
    summary = json.loads(capsys.readouterr().out)
    assert summary["status"] == "FAILURE"
    assert summary["violation"]["check"] == "Bias"
    assert summary["violation"]["repetition"] == 1


def test_failure_prints_reproduction_command(config_file, capsys):
    main([
        "run", "capabilities:ConstantCapability",
        "--config", str(config_file),
        "--seed", "5",
        "--sequence-length", "2",
    ])

    out = capsys.readouterr().out
    assert "FAILURE: Assertion failed in Bias" in out
    assert "Reproduce with: check capabilities:ConstantCapability Bias --seed " in out
    assert "--sequence-length 2" in out


def test_check_replays_recorded_seed(config_file, capsys):
    main([
        "run", "capabilities:ConstantCapability",
        "--config", str(config_file),
        "--seed", "5",
        "--sequence-length", "2",
        "--json-output",
    ])
    seed = json.loads(capsys.readouterr().out)["violation"]["seed"]

    code = main([
        "check", "capabilities:ConstantCapability", "Bias",
        "--seed", seed,
        "--config", str(config_file),
        "--sequence-length", "2",
        "--json-output",
    ])

    assert code == EXIT_VIOLATION
    replay = json.loads(capsys.readouterr().out)
    assert replay["violation"]["seed"] == seed


def test_check_subcommand_requires_seed():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["check", "capabilities:TransitionTable", "Bias"])


def test_check_subcommand_requires_sequence_length():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["check", "capabilities:TransitionTable", "Bias", "--seed", "00000000000000ff"])


@pytest.mark.parametrize(
    "option, value",
    [
        ("--repetitions", "0"),
        ("--seed", "-1"),
        ("--sequence-length", "0"),
    ],
)
def test_out_of_range_overrides_are_usage_errors(config_file, capsys, option, value):
    with pytest.raises(SystemExit) as excinfo:
        main(["run", "capabilities:ConstantCapability", "--config", str(config_file), option, value, "--json-output"])

    assert excinfo.value.code == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert option in captured.err


def test_overrides_are_validated_by_config(config_file):
    args = argparse.Namespace(config=config_file, seed=None, repetitions=0, sequence_length=None)

    with pytest.raises(ValueError, match="repetitions"):
        build_config(args)


def test_overrides_replace_file_values(config_file):
    args = argparse.Namespace(config=config_file, seed=4, repetitions=3, sequence_length=2)

    config = build_config(args)

    assert (config.seed, config.repetitions, config.sequence_length) == (4, 3, 2)
    assert config.simulated_infinity == 20
