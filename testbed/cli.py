"""
Conformance Testbed CLI

Runs the axiom battery against a predictive capability class given as an
import path (``package.module:ClassName``).

Exit status: 0 on PASS, 1 on an axiom violation, 2 on an infeasible
configuration.
"""
import argparse
import dataclasses
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .checks import CHECKS
from .config import TestbedConfig, load_config_from_env
from .driver import Testbed
from .errors import AxiomViolation, ConfigurationInfeasible
from .model import PredictiveCapability

EXIT_PASS = 0
EXIT_VIOLATION = 1
EXIT_INFEASIBLE = 2


def load_capability(path: str) -> type:
    """Resolve ``package.module:ClassName`` to a PredictiveCapability subclass."""
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"model must be given as 'module:ClassName', got {path!r}")
    target = getattr(importlib.import_module(module_name), attribute)
    if not (isinstance(target, type) and issubclass(target, PredictiveCapability)):
        raise TypeError(f"{path} is not a PredictiveCapability subclass")
    return target


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {text}")
    return value


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def build_config(args) -> TestbedConfig:
    """File or environment config with command-line overrides, re-validated."""
    if args.config:
        config = TestbedConfig.from_file(args.config)
    else:
        config = load_config_from_env() or TestbedConfig()
    overrides = {
        name: getattr(args, name)
        for name in ("seed", "repetitions", "sequence_length")
        if getattr(args, name, None) is not None
    }
    return dataclasses.replace(config, **overrides)


def _emit(summary: dict, json_output: bool) -> None:
    if json_output:
        print(json.dumps(summary, indent=2))
    elif summary["status"] == "PASS":
        print("\nPASS")
    else:
        print(f"\n{summary['status']}: {summary['message']}")


def _failure(status: str, exc: Exception, seed: Optional[str]) -> dict:
    summary = {"status": status, "message": str(exc), "seed": seed}
    if isinstance(exc, AxiomViolation):
        summary["violation"] = exc.to_dict()
    return summary


def run_battery(args) -> int:
    """
    Handler for the 'run' subcommand.

    Runs every selected check and stops at the first violation.
    """
    testbed = Testbed(load_capability(args.model), build_config(args))
    try:
        report = testbed.run(args.check or None)
    except AxiomViolation as exc:
        _emit(_failure("FAILURE", exc, testbed.seed), args.json_output)
        if not args.json_output:
            print(f"Reproduce with: check {args.model} {exc.check} --seed {exc.seed} --sequence-length {testbed.difficulty}")
        return EXIT_VIOLATION
    except ConfigurationInfeasible as exc:
        _emit(_failure("INFEASIBLE", exc, testbed.seed), args.json_output)
        return EXIT_INFEASIBLE

    if not args.json_output:
        for check in report.checks:
            print(f"  [PASS] {check.title}")
    _emit(report.to_dict(), args.json_output)
    return EXIT_PASS


def replay_check(args) -> int:
    """
    Handler for the 'check' subcommand.

    Replays one repetition of a named check from a recorded seed.
    """
    testbed = Testbed(load_capability(args.model), build_config(args))
    try:
        testbed.run_check(args.name, args.replay_seed, args.sequence_length)
    except AxiomViolation as exc:
        _emit(_failure("FAILURE", exc, args.replay_seed), args.json_output)
        return EXIT_VIOLATION
    except ConfigurationInfeasible as exc:
        _emit(_failure("INFEASIBLE", exc, args.replay_seed), args.json_output)
        return EXIT_INFEASIBLE
    _emit({"status": "PASS", "check": args.name, "seed": args.replay_seed}, args.json_output)
    return EXIT_PASS


def list_checks(args) -> int:
    for check in CHECKS:
        print(check.title)
    return EXIT_PASS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Temporal predictor conformance testbed")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- run subcommand ---
    run_parser = subparsers.add_parser("run", help="Run the axiom battery against a model.")
    run_parser.add_argument("model", help="Capability class as 'module:ClassName'.")
    run_parser.add_argument("--config", type=Path, help="YAML configuration file.")
    run_parser.add_argument("--seed", type=_non_negative_int, help="Run seed (non-negative integer).")
    run_parser.add_argument("--repetitions", type=_positive_int, help="Repetitions per check.")
    run_parser.add_argument("--sequence-length", type=_positive_int, help="Skip difficulty estimation.")
    run_parser.add_argument("--check", action="append", help="Run only this check (repeatable).")
    run_parser.add_argument("--json-output", action="store_true", help="Output results as JSON to stdout.")
    run_parser.set_defaults(func=run_battery)

    # --- check subcommand ---
    check_parser = subparsers.add_parser("check", help="Replay one check from a recorded seed.")
    check_parser.add_argument("model", help="Capability class as 'module:ClassName'.")
    check_parser.add_argument("name", help="Check name, e.g. 'Determinism'.")
    check_parser.add_argument("--seed", dest="replay_seed", required=True, help="Hex seed reported by the failing run.")
    check_parser.add_argument("--config", type=Path, help="YAML configuration file.")
    check_parser.add_argument(
        "--sequence-length", type=_positive_int, required=True, help="Difficulty reported by the failing run."
    )
    check_parser.add_argument("--json-output", action="store_true", help="Output results as JSON to stdout.")
    check_parser.set_defaults(func=replay_check)

    # --- list subcommand ---
    list_parser = subparsers.add_parser("list", help="List the available checks.")
    list_parser.set_defaults(func=list_checks)

    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
