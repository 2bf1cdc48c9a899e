"""CLI entry points for the propolis zone brand."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from typing import List, Optional

from propolis_brand.config import default_config, parse_env
from propolis_brand.constants import BRAND_NAME
from propolis_brand.exceptions import BrandError, ConfigError, UsageError
from propolis_brand.lifecycle import LifecycleCoordinator, validate_zone
from propolis_brand.models import BrandConfig, Outcome
from propolis_brand.utils import log

_HOOKS = ("install", "boot", "halt", "uninstall")


def show_config(cfg: BrandConfig) -> None:
    """Print the resolved brand configuration."""
    for field in dataclasses.fields(cfg):
        value = getattr(cfg, field.name)
        print(f"  {field.name}: {value if value is not None else '-'}")


def print_status(coordinator: LifecycleCoordinator) -> None:
    status = coordinator.status()
    print(f"Zone:    {status.zone}")
    print(f"Installed: {'yes' if status.installed else 'no'}")
    print(f"Process: {status.process_state}")
    if status.pid is not None:
        print(f"PID:     {status.pid}")
    print(f"VNIC:    {status.vnic} ({status.vnic_state})")
    print(f"Log:     {status.log_file}")


def print_log(coordinator: LifecycleCoordinator, tail: int) -> None:
    path = coordinator.layout.log_file
    lines = coordinator.read_log(tail)
    if lines is None:
        print(f"=== propolis log: not found at {path} (zone may not have been booted yet) ===")
        return
    print(f"=== propolis log ({path}) ===")
    for line in lines:
        print(line)


def _report(command: str, outcome: Outcome) -> int:
    for message in outcome.warnings:
        log("DEBUG", f"{command}: recovered from: {message}")
    if outcome.fatal:
        log("ERROR", f"{command} failed: {outcome.error}")
    return outcome.exit_code


def _resolve_config(command: str) -> BrandConfig:
    try:
        return parse_env()
    except ConfigError as exc:
        # halt must still clean up with a broken config file
        if command != "halt":
            raise
        log("WARN", f"{exc}; halting with default settings")
        return default_config()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=f"{BRAND_NAME}-brand", description="propolis zone brand hooks")
    sub = parser.add_subparsers(dest="command", required=True)

    for hook in _HOOKS:
        hook_parser = sub.add_parser(hook, help=f"run the {hook} hook")
        # optional at the argparse level so that missing args are a UsageError (exit 1)
        hook_parser.add_argument("zone_name", nargs="?", default="")
        hook_parser.add_argument("zone_root", nargs="?", default="")

    support = sub.add_parser("support", help="run the prestate/poststate hook")
    support.add_argument("action", nargs="?", default="")
    support.add_argument("zone_name", nargs="?", default="")
    support.add_argument("zone_root", nargs="?", default="")

    status = sub.add_parser("status", help="show hypervisor and VNIC state for a zone")
    status.add_argument("zone_name", nargs="?", default="")
    status.add_argument("zone_root", nargs="?", default="")

    log_parser = sub.add_parser("log", help="print the hypervisor log for a zone")
    log_parser.add_argument("zone_name", nargs="?", default="")
    log_parser.add_argument("zone_root", nargs="?", default="")
    log_parser.add_argument("-n", "--tail", type=int, default=0, help="show the last N lines (0 = all)")

    sub.add_parser("show-config", help="show the resolved brand configuration")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.command == "support" and not args.action:
            raise UsageError("support requires an action (prestate|poststate)")
        if args.command != "show-config":
            zone = validate_zone(args.zone_name, args.zone_root)
        cfg = _resolve_config(args.command)
        if args.command == "show-config":
            show_config(cfg)
            return 0

        coordinator = LifecycleCoordinator(zone, cfg)
        if args.command == "status":
            print_status(coordinator)
            return 0
        if args.command == "log":
            print_log(coordinator, args.tail)
            return 0
        outcome = Outcome()
        try:
            if args.command == "support":
                outcome.merge(coordinator.support(args.action))
            else:
                outcome.merge(getattr(coordinator, args.command)())
        except UsageError:
            raise
        except BrandError as exc:
            outcome.fail(str(exc))
        return _report(args.command, outcome)
    except UsageError as exc:
        log("ERROR", f"usage: {exc}")
        return 1
    except BrandError as exc:
        log("ERROR", str(exc))
        return 1
    except Exception as exc:
        log("ERROR", f"Unexpected error: {exc}")
        import traceback

        traceback.print_exc()
        return 1


def _hook_main(command: str) -> int:
    return main([command, *sys.argv[1:]])


def install_main() -> int:
    return _hook_main("install")


def boot_main() -> int:
    return _hook_main("boot")


def halt_main() -> int:
    return _hook_main("halt")


def uninstall_main() -> int:
    return _hook_main("uninstall")


def support_main() -> int:
    return _hook_main("support")
