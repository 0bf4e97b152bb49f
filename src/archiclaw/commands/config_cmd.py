"""
archiclaw.commands.config_cmd - View and modify configuration.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import tomlkit

from archiclaw.commands.validate import load_configuration
from archiclaw.config import (
    CONFIG_FILENAME,
    _try_parse_env_value,
    get_config_value,
    set_config_value,
)


def run(args: argparse.Namespace) -> int:
    """Run the config command.

    Subcommands:
    - path: print the config file in use
    - show: print the effective configuration
    - get KEY: print one value
    - set KEY VALUE: write one value to the config file
    """
    action = getattr(args, "config_action", None)
    config, config_path = load_configuration(args)

    if action == "path":
        if config_path is None:
            print(f"No {CONFIG_FILENAME} found (using defaults)")
        else:
            print(config_path)
        return 0

    elif action == "show":
        if args.json:
            print(json.dumps(config, indent=2))
        else:
            print(tomlkit.dumps(config), end="")
        return 0

    elif action == "get":
        try:
            value = get_config_value(config, args.key)
        except KeyError:
            print(f"Error: Unknown config key: {args.key}", file=sys.stderr)
            return 1
        print(json.dumps(value) if isinstance(value, (dict, list, bool)) else value)
        return 0

    elif action == "set":
        target = Path(config_path) if config_path else Path.cwd() / CONFIG_FILENAME
        set_config_value(target, args.key, _try_parse_env_value(args.value))
        if not args.quiet:
            print(f"Set {args.key} in {target}")
        return 0

    print("Usage: archiclaw config <path|show|get|set>", file=sys.stderr)
    return 1
