"""
archiclaw.commands.query_cmd - Query landscape records.

Prints JSON for every lookup. Reads the landscape directory (validating it on
the way) or, with ``--bundle``, a previously written bundle.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from archiclaw.commands.validate import landscape_root, load_configuration
from archiclaw.core.models import to_plain
from archiclaw.core.query import LandscapeQuery
from archiclaw.core.snapshot import Landscape


def run(args: argparse.Namespace) -> int:
    """
    Run the query command.

    Subcommands:
    - app / domain: single record by id (exit 1 when not found)
    - apps / capabilities / entities: records of a domain
    - integrations: integrations of an app, or between two apps
    - changes: change requests referencing an app
    - search: full-text search
    - summary: record counts
    """
    action = getattr(args, "query_action", None)
    if action is None:
        print(
            "Usage: archiclaw query "
            "<app|domain|apps|capabilities|entities|integrations|changes|search|summary>",
            file=sys.stderr,
        )
        return 1

    query = LandscapeQuery(_load_landscape(args))

    if action == "app":
        return _print_record(query.get_application(args.app_id), f"Application {args.app_id}")
    if action == "domain":
        return _print_record(query.get_domain(args.domain_id), f"Domain {args.domain_id}")
    if action == "apps":
        return _print_json([to_plain(a) for a in query.get_applications_by_domain(args.domain_id)])
    if action == "capabilities":
        return _print_json([to_plain(c) for c in query.get_capabilities_by_domain(args.domain_id)])
    if action == "entities":
        return _print_json(
            [to_plain(e) for e in query.get_data_entities_by_domain(args.domain_id)]
        )
    if action == "integrations":
        if args.other_id:
            found = query.get_integrations_between(args.app_id, args.other_id)
        else:
            found = query.get_integrations_for_app(args.app_id)
        return _print_json([to_plain(i) for i in found])
    if action == "changes":
        return _print_json([to_plain(c) for c in query.get_change_requests_for_app(args.app_id)])
    if action == "search":
        return _print_json(query.search(args.text).to_dict())
    if action == "summary":
        return _print_json(query.summary())

    print(f"Unknown query: {action}", file=sys.stderr)
    return 1


def _load_landscape(args: argparse.Namespace) -> Landscape:
    if getattr(args, "bundle", None):
        return Landscape.from_bundle(args.bundle)
    config, config_path = load_configuration(args)
    return Landscape.load(landscape_root(args, config, config_path), config)


def _print_record(record: Any, label: str) -> int:
    if record is None:
        print(f"{label} not found", file=sys.stderr)
        return 1
    return _print_json(to_plain(record))


def _print_json(data: Any) -> int:
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0
