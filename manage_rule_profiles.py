#!/usr/bin/env python3
"""
Utility for managing JSON trading rule profiles.

Commands:
  list                  - Show discoverable profiles.
  validate [profile]    - Validate one or all profiles against the schema.
  show [profile]        - Print the rules of a profile.
  set-active PROFILE    - Mark a profile as the active selection.
  show-active           - Print the currently active profile name.
  clear-active          - Forget the active selection.
"""

import argparse
from pathlib import Path
from typing import List, Optional

import file_utils
from config import Config
from rule_profile_manager import RuleProfileManager


def make_manager(args: argparse.Namespace) -> RuleProfileManager:
    config = Config()
    if args.config_dir:
        config_dir = Path(args.config_dir)
    else:
        config_dir = Path(config.rules_profile_dir)
        if not config_dir.is_absolute():
            config_dir = file_utils.data_path(*config_dir.parts)
    return RuleProfileManager(
        config_dir=str(config_dir),
        default_profile=config.rules_default_profile,
    )


def cmd_list(args: argparse.Namespace) -> int:
    manager = make_manager(args)
    entries = manager.list_profiles()
    if not entries:
        print("No rule profiles found.")
        return 1

    for entry in entries:
        print(f"{entry['name']}\t{entry['source']}\t{entry['path']}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    manager = make_manager(args)
    names: List[str]
    if args.profile:
        names = [args.profile]
    else:
        names = [entry["name"] for entry in manager.list_profiles()]

    failures = []
    for name in names:
        try:
            manager.validate_profile(name)
            print(f"Validated {name}")
        except (FileNotFoundError, ValueError) as exc:
            print(f"Validation failed for {name}: {exc}")
            failures.append(name)
    return 1 if failures else 0


def cmd_show(args: argparse.Namespace) -> int:
    manager = make_manager(args)
    try:
        rules = manager.load_rules(args.profile)
    except (FileNotFoundError, ValueError) as exc:
        print(exc)
        return 2
    for rule in rules:
        print(f"{rule.rule_type.value}\t{', '.join(rule.allowed_values)}")
    return 0


def cmd_set_active(args: argparse.Namespace) -> int:
    manager = make_manager(args)
    try:
        manager.set_active_profile(args.profile)
        print(f"Active profile set to {args.profile}")
        return 0
    except FileNotFoundError as exc:
        print(exc)
        return 1


def cmd_show_active(args: argparse.Namespace) -> int:
    manager = make_manager(args)
    print(manager.get_active_profile_name())
    return 0


def cmd_clear_active(args: argparse.Namespace) -> int:
    manager = make_manager(args)
    manager.clear_active_profile()
    print("Active profile cleared")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Manage JSON trading rule profiles."
    )
    parser.add_argument(
        "--config-dir",
        help="Directory holding presets/ and user/ profiles (default from config.ini).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List all rule profiles.")

    validate_parser = subparsers.add_parser(
        "validate", help="Validate profiles against the schema."
    )
    validate_parser.add_argument(
        "--profile",
        "-p",
        help="Specific profile name to validate; defaults to all discovered profiles.",
    )

    show_parser = subparsers.add_parser("show", help="Print the rules of a profile.")
    show_parser.add_argument(
        "profile", nargs="?", help="Profile name; defaults to the active profile."
    )

    set_active_parser = subparsers.add_parser(
        "set-active", help="Mark a profile as active."
    )
    set_active_parser.add_argument(
        "profile", help="Profile name that should be active."
    )

    subparsers.add_parser("show-active", help="Print the active profile.")
    subparsers.add_parser("clear-active", help="Clear the active profile selection.")

    args = parser.parse_args(argv)
    if args.command == "list":
        return cmd_list(args)
    if args.command == "validate":
        return cmd_validate(args)
    if args.command == "show":
        return cmd_show(args)
    if args.command == "set-active":
        return cmd_set_active(args)
    if args.command == "show-active":
        return cmd_show_active(args)
    if args.command == "clear-active":
        return cmd_clear_active(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
