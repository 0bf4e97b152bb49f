"""
archiclaw.commands - CLI command implementations
"""

__all__ = [
    "bundle",
    "config_cmd",
    "ids_cmd",
    "query_cmd",
    "serve",
    "validate",
]
