from __future__ import annotations

import argparse
import asyncio
import os
import sys
from dataclasses import fields
from pathlib import Path
from typing import Any

from .config import Config, ConfigError, _is_field_type, _parse_optional, _unwrap_optional, load_endpoints
from .race import run_race
from .report import format_report, report_from_logs, write_report


def _str2bool(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise argparse.ArgumentTypeError(f"invalid bool: {value}")


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    for field in fields(Config):
        name = field.name.replace("_", "-")
        if _is_field_type(field.type, bool, "bool"):
            group = parser.add_mutually_exclusive_group()
            group.add_argument(f"--{name}", dest=field.name, action="store_true")
            group.add_argument(f"--no-{name}", dest=field.name, action="store_false")
            parser.set_defaults(**{field.name: None})
        else:
            parser.add_argument(f"--{name}", dest=field.name, default=None)


def _cli_overrides(ns: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field in fields(Config):
        value = getattr(ns, field.name, None)
        if value is None:
            continue
        base_type, is_optional = _unwrap_optional(field.type)
        if is_optional:
            parsed = _parse_optional(value, base_type)
            if parsed is not None:
                overrides[field.name] = parsed
        elif _is_field_type(field.type, bool, "bool"):
            overrides[field.name] = _str2bool(value)
        elif _is_field_type(field.type, int, "int"):
            overrides[field.name] = int(value)
        elif _is_field_type(field.type, float, "float"):
            overrides[field.name] = float(value)
        else:
            overrides[field.name] = value
    return overrides


def _run(config: Config, run_id: str | None) -> int:
    config.validate()
    endpoints = load_endpoints(config.endpoints_file)
    result = asyncio.run(run_race(config, endpoints, run_id=run_id, install_signals=True))
    for outcome in result.outcomes:
        if outcome.error is not None:
            print(f"endpoint {outcome.endpoint} failed: {outcome.error}", file=sys.stderr)
    print(format_report(result.report))
    return 0 if result.ok else 1


def _report(run_dir: Path, *, write: bool) -> int:
    report = report_from_logs(run_dir)
    if write:
        path = write_report(run_dir, report)
        print(f"report written to {path}")
    print(format_report(report, stable=True))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="geyser_race")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    _add_config_args(common)

    run = subparsers.add_parser("run", parents=[common])
    run.add_argument("--run-id", default=None)

    report = subparsers.add_parser("report")
    report.add_argument("run_dir")
    report.add_argument("--write", action="store_true")

    args = parser.parse_args(argv)
    try:
        if args.command == "run":
            config = Config.from_env_and_cli(_cli_overrides(args), dict(os.environ))
            return _run(config, args.run_id)
        if args.command == "report":
            return _report(Path(args.run_dir), write=args.write)
    except (ConfigError, FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
