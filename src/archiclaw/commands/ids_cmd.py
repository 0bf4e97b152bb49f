"""
archiclaw.commands.ids_cmd - Allocate identifiers and inspect counters.

Allocation is a read-modify-write of ``.archiclaw/id-sequences.yaml`` and
assumes a single writer: run one allocation at a time per landscape.
"""

from __future__ import annotations

import argparse
import sys

from archiclaw.commands.validate import landscape_root, load_configuration
from archiclaw.core.ids import (
    ConcurrentModification,
    IdSequenceStore,
    allocate_next_id,
    is_domain_id,
)
from archiclaw.core.loader import LandscapeLayout


def run(args: argparse.Namespace) -> int:
    """Run the id command.

    Subcommands:
    - next: allocate and print the next id for DOMAIN and TYPE
    - show: print all counters
    """
    config, config_path = load_configuration(args)
    root = landscape_root(args, config, config_path)
    store = IdSequenceStore(LandscapeLayout.from_config(config).sequences_path(root))

    action = getattr(args, "id_action", None)
    if action == "next":
        return _next_id(store, args)
    elif action == "show":
        return _show(store)
    else:
        print("Usage: archiclaw id <next|show>", file=sys.stderr)
        return 1


def _next_id(store: IdSequenceStore, args: argparse.Namespace) -> int:
    domain = args.domain.upper()
    if not is_domain_id(domain):
        print(f"Error: Invalid domain code: {args.domain}", file=sys.stderr)
        return 1
    if not store.exists():
        print(f"Error: Counter file not found: {store.path}", file=sys.stderr)
        return 1

    try:
        new_id = allocate_next_id(store, domain, args.type, check_concurrent=args.check_concurrent)
    except ConcurrentModification as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(new_id)
    return 0


def _show(store: IdSequenceStore) -> int:
    if not store.exists():
        print(f"Error: Counter file not found: {store.path}", file=sys.stderr)
        return 1

    sequences = store.read()
    if not sequences:
        print("No counters allocated yet.")
        return 0
    for domain in sorted(sequences):
        counters = ", ".join(f"{t}={n}" for t, n in sorted(sequences[domain].items()))
        print(f"{domain}: {counters}")
    return 0
