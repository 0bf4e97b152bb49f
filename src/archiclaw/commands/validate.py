"""
archiclaw.commands.validate - Validate landscape command.

Validates schemas, identifiers, placement, references and sequence counters.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from archiclaw.config import find_config_file, load_config, merge_configs, resolve_landscape_root
from archiclaw.core.loader import LandscapeNotFound
from archiclaw.core.rules import RulesConfig, Severity, ValidationResult
from archiclaw.core.validator import LandscapeValidator


def run(args: argparse.Namespace) -> int:
    """
    Run the validate command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for validation errors)
    """
    config, config_path = load_configuration(args)
    root = landscape_root(args, config, config_path)

    if args.skip_code:
        skip = RulesConfig.from_dict(config["rules"]).skip_codes + list(args.skip_code)
        config = merge_configs(config, {"rules": {"skip_codes": skip}})

    if not args.quiet and not args.json:
        print(f"Validating landscape in: {root}")

    try:
        result = LandscapeValidator(root, config).validate()
    except LandscapeNotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif not args.quiet:
        print_report(result)
    else:
        for issue in result.errors:
            print(issue, file=sys.stderr)

    return 0 if result.valid else 1


def print_report(result: ValidationResult) -> None:
    """Print issues (errors first) followed by counts and a verdict."""
    if result.issues:
        print()
        for issue in sorted(result.issues, key=lambda i: i.severity != Severity.ERROR):
            print(issue)
            print()

    stats = result.stats
    print("─" * 60)
    print(
        f"Applications: {stats.applications}  Domains: {stats.domains}  "
        f"Capabilities: {stats.capabilities}  Data entities: {stats.data_entities}  "
        f"Change requests: {stats.change_requests}"
    )
    if result.errors:
        print(f"❌ {len(result.errors)} errors")
    if result.warnings:
        print(f"⚠️  {len(result.warnings)} warnings")
    if result.valid:
        print("✓ Landscape valid")


def load_configuration(args: argparse.Namespace) -> Tuple[Dict[str, Any], Optional[Path]]:
    """
    Load configuration from --config, a discovered ``.archiclaw.toml``, or
    defaults, and apply its ``[logging] level`` unless -v/-q was given.

    Returns:
        (config, config_path); config_path is None when running on defaults

    Raises:
        ConfigError: If the config file is unreadable or malformed
    """
    config_path = getattr(args, "config", None) or find_config_file(Path.cwd())
    config = load_config(config_path)

    if not (getattr(args, "verbose", False) or getattr(args, "quiet", False)):
        level_name = str(config.get("logging", {}).get("level", "WARNING")).upper()
        logging.getLogger().setLevel(getattr(logging, level_name, logging.WARNING))

    return config, config_path


def landscape_root(
    args: argparse.Namespace, config: Dict[str, Any], config_path: Optional[Path]
) -> Path:
    """Landscape directory from --landscape or ``[landscape] root``."""
    return resolve_landscape_root(config, config_path, getattr(args, "landscape", None))
