"""
archiclaw - Enterprise architecture landscape tooling

archiclaw keeps an organization's applications, domains, capabilities,
data entities, integrations and change requests as YAML records, and
validates, bundles and queries that catalog.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("archiclaw")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed

from archiclaw.core.ids import EntityType, MalformedIdentifier, format_id, parse_id
from archiclaw.core.loader import LandscapeNotFound
from archiclaw.core.rules import Severity, ValidationIssue, ValidationResult
from archiclaw.core.snapshot import Landscape
from archiclaw.core.validator import LandscapeValidator, validate_landscape

__all__ = [
    "__version__",
    "EntityType",
    "Landscape",
    "LandscapeNotFound",
    "LandscapeValidator",
    "MalformedIdentifier",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "format_id",
    "parse_id",
    "validate_landscape",
]
