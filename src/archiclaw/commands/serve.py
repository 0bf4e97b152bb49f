"""
archiclaw.commands.serve - Serve the landscape as a read-only JSON API.
"""

from __future__ import annotations

import argparse
import logging
import sys

from archiclaw.commands.validate import landscape_root, load_configuration
from archiclaw.core.loader import LandscapeNotFound
from archiclaw.core.snapshot import Landscape

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace) -> int:
    """Run the serve command."""
    from archiclaw.server import create_app

    config, config_path = load_configuration(args)
    root = landscape_root(args, config, config_path)

    try:
        landscape = Landscape.load(root, config)
    except LandscapeNotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not landscape.validation.valid:
        logger.warning(
            "Serving a landscape with %d validation errors", len(landscape.validation.errors)
        )

    server_config = config.get("server", {})
    host = args.host or server_config.get("host", "127.0.0.1")
    port = args.port or int(server_config.get("port", 8080))

    app = create_app(landscape)
    if not args.quiet:
        print(f"Serving {root} at http://{host}:{port}/api/status")
    app.run(host=host, port=port, debug=False)
    return 0
