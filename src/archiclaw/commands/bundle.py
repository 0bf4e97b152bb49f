"""
archiclaw.commands.bundle - Write the landscape JSON bundle.

The bundle is written even when validation fails, so that downstream
consumers can inspect the embedded validation result; the exit code is 1
whenever that result contains errors.
"""

import argparse
import sys
from pathlib import Path

from archiclaw.commands.validate import landscape_root, load_configuration
from archiclaw.core.loader import LandscapeNotFound
from archiclaw.core.snapshot import Landscape


def run(args: argparse.Namespace) -> int:
    """Run the bundle command."""
    config, config_path = load_configuration(args)
    root = landscape_root(args, config, config_path)

    output = args.output
    if output is None:
        output = Path(config.get("bundle", {}).get("output", "landscape-data.json"))
        if not output.is_absolute() and config_path is not None:
            output = Path(config_path).parent / output

    try:
        landscape = Landscape.load(root, config)
    except LandscapeNotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    landscape.write_bundle(output)
    result = landscape.validation

    if not args.quiet:
        stats = landscape.stats()
        print(f"Landscape bundled to {output}")
        print(f"  Domains: {stats['domains']}")
        print(f"  Applications: {stats['applications']}")
        print(f"  Capabilities: {stats['capabilities']}")
        print(f"  Integrations: {stats['integrations']}")
        print(f"  Data Entities: {stats['dataEntities']}")
        print(f"  Change Requests: {stats['changeRequests']}")

        if result.issues:
            print(f"\n  Issues: {len(result.issues)}")
            for issue in result.issues:
                print(f"    [{issue.severity.value}] {issue.file}: {issue.message}")

    if not result.valid:
        print("\nBundle completed with validation errors.", file=sys.stderr)
        return 1
    return 0
