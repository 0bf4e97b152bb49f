"""
archiclaw.core.rules - Validation issue taxonomy and rule configuration.

Issues are values: the validator collects them and never raises past its
boundary. ``ValidationResult.valid`` is decided by error-severity issues only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class Severity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"
    WARNING = "warning"


class IssueCode(str, Enum):
    """Kinds of validation issues."""

    FILE_NOT_FOUND = "FileNotFound"
    SCHEMA_VIOLATION = "SchemaViolation"
    DUPLICATE_IDENTIFIER = "DuplicateIdentifier"
    PLACEMENT_MISMATCH = "PlacementMismatch"
    UNRESOLVED_REFERENCE = "UnresolvedReference"
    SEQUENCE_EXCEEDED = "SequenceExceeded"
    HIERARCHY_INCONSISTENT = "HierarchyInconsistent"


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single problem found in the landscape.

    Attributes:
        file: Path relative to the landscape root (POSIX separators)
        message: Human-readable description
        severity: Error or warning
        code: Issue kind
    """

    file: str
    message: str
    severity: Severity
    code: IssueCode

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        prefix = {
            Severity.ERROR: "❌ ERROR",
            Severity.WARNING: "⚠️ WARNING",
        }.get(self.severity, "?")
        return f"{prefix} [{self.code.value}] {self.file}\n   {self.message}"

    def to_dict(self) -> Dict[str, str]:
        return {
            "file": self.file,
            "message": self.message,
            "severity": self.severity.value,
            "code": self.code.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationIssue":
        code = data.get("code")
        severity = Severity(data["severity"])
        if code is None:
            # Bundles written without codes: infer the closest kind
            code = (
                IssueCode.UNRESOLVED_REFERENCE
                if severity == Severity.WARNING
                else IssueCode.SCHEMA_VIOLATION
            )
        return cls(
            file=data["file"],
            message=data["message"],
            severity=severity,
            code=IssueCode(code),
        )


def error(file: str, message: str, code: IssueCode) -> ValidationIssue:
    return ValidationIssue(file=file, message=message, severity=Severity.ERROR, code=code)


def warning(file: str, message: str, code: IssueCode) -> ValidationIssue:
    return ValidationIssue(file=file, message=message, severity=Severity.WARNING, code=code)


@dataclass
class LandscapeStats:
    """Counts of successfully parsed records per kind."""

    applications: int = 0
    domains: int = 0
    data_entities: int = 0
    capabilities: int = 0
    change_requests: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "applications": self.applications,
            "domains": self.domains,
            "dataEntities": self.data_entities,
            "capabilities": self.capabilities,
            "changeRequests": self.change_requests,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LandscapeStats":
        return cls(
            applications=data.get("applications", 0),
            domains=data.get("domains", 0),
            data_entities=data.get("dataEntities", 0),
            capabilities=data.get("capabilities", 0),
            change_requests=data.get("changeRequests", 0),
        )


@dataclass
class ValidationResult:
    """Outcome of a validation run."""

    issues: List[ValidationIssue] = field(default_factory=list)
    stats: LandscapeStats = field(default_factory=LandscapeStats)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def valid(self) -> bool:
        return not self.errors

    def issues_with_code(self, code: IssueCode) -> List[ValidationIssue]:
        return [i for i in self.issues if i.code == code]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationResult":
        return cls(
            issues=[ValidationIssue.from_dict(i) for i in data.get("issues", [])],
            stats=LandscapeStats.from_dict(data.get("stats", {})),
        )


@dataclass
class RulesConfig:
    """
    Optional validation rules.

    All extra checks default to off; the default run enforces schema,
    uniqueness, placement, change-request references and sequence counters.

    Attributes:
        check_capability_hierarchy: Report parent/children disagreements and
            cycles in the capability tree
        check_data_entity_references: Report data entity application-map keys
            that are not known applications
        check_integration_references: Report registry integrations whose
            endpoints are not known applications
        skip_codes: Issue codes to drop from the result
    """

    check_capability_hierarchy: bool = False
    check_data_entity_references: bool = False
    check_integration_references: bool = False
    skip_codes: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RulesConfig":
        """Create RulesConfig from the ``[rules]`` configuration section."""
        return cls(
            check_capability_hierarchy=bool(data.get("check_capability_hierarchy", False)),
            check_data_entity_references=bool(data.get("check_data_entity_references", False)),
            check_integration_references=bool(data.get("check_integration_references", False)),
            skip_codes=_code_list(data.get("skip_codes", [])),
        )

    def is_skipped(self, issue: ValidationIssue) -> bool:
        return issue.code.value in self.skip_codes


def _code_list(value: Any) -> List[str]:
    # A single code may be given as a bare string (TOML or environment)
    if isinstance(value, str):
        return [value]
    return [str(code) for code in value]
