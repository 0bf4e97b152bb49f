"""
archiclaw.core - Identifiers, schemas, reading, validation and queries
"""

from archiclaw.core.ids import EntityType, IdSequenceStore, ParsedId, allocate_next_id, parse_id
from archiclaw.core.loader import LandscapeLayout, LandscapeNotFound, LandscapeReader
from archiclaw.core.models import RecordKind, validate_record
from archiclaw.core.query import LandscapeQuery, SearchResults
from archiclaw.core.rules import IssueCode, RulesConfig, Severity, ValidationIssue, ValidationResult
from archiclaw.core.snapshot import Landscape
from archiclaw.core.validator import LandscapeValidator, ValidationContext, validate_landscape

__all__ = [
    "EntityType",
    "IdSequenceStore",
    "IssueCode",
    "Landscape",
    "LandscapeLayout",
    "LandscapeNotFound",
    "LandscapeQuery",
    "LandscapeReader",
    "LandscapeValidator",
    "ParsedId",
    "RecordKind",
    "RulesConfig",
    "SearchResults",
    "Severity",
    "ValidationContext",
    "ValidationIssue",
    "ValidationResult",
    "allocate_next_id",
    "parse_id",
    "validate_landscape",
    "validate_record",
]
