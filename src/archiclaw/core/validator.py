"""
archiclaw.core.validator - Landscape validation engine.

Runs four sequential phases over one landscape scan:

1. Structure: every file is schema-validated (done by the reader)
2. Identity and placement: global id uniqueness, folder name == declared id,
   passport domain == domain component of its id
3. Cross-references: change request -> application ids
4. Sequences: no allocated id exceeds its (domain, type) counter

State is carried in an explicit ``ValidationContext``; a run never raises for
landscape content problems, it reports them as issues.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from archiclaw.core.ids import MalformedIdentifier, is_valid_id, parse_id
from archiclaw.core.loader import (
    LandscapeLayout,
    LandscapeReader,
    LandscapeScan,
    SourceFile,
)
from archiclaw.core.models import Capability, RecordKind
from archiclaw.core.rules import (
    IssueCode,
    LandscapeStats,
    RulesConfig,
    ValidationIssue,
    ValidationResult,
    error,
    warning,
)

logger = logging.getLogger(__name__)

# Noun used in placement messages, per directory-per-entity kind
_PLACEMENT_NOUNS = {
    RecordKind.DOMAIN: "domain",
    RecordKind.APPLICATION: "passport",
    RecordKind.CHANGE_REQUEST: "change",
}


@dataclass
class ValidationContext:
    """
    Accumulated state of one validation run.

    Attributes:
        issues: Issues in the order they were found
        registry: Registered ids mapped to the file of their first occurrence
            (insertion ordered, i.e. traversal order)
        stats: Counts of parsed records
    """

    issues: List[ValidationIssue] = field(default_factory=list)
    registry: Dict[str, str] = field(default_factory=dict)
    stats: LandscapeStats = field(default_factory=LandscapeStats)

    def report(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def register(self, entity_id: str, file: str) -> bool:
        """Register an id; report and return False if it is already known."""
        if entity_id in self.registry:
            self.report(error(file, f"Duplicate ID: {entity_id}", IssueCode.DUPLICATE_IDENTIFIER))
            return False
        self.registry[entity_id] = file
        return True

    def knows(self, entity_id: str) -> bool:
        return entity_id in self.registry


class LandscapeValidator:
    """
    Validates a landscape directory.

    Example:
        validator = LandscapeValidator(Path("landscape"))
        result = validator.validate()
        if not result.valid:
            for issue in result.errors:
                print(issue)
    """

    def __init__(
        self,
        root: Path,
        config: Optional[Mapping[str, Any]] = None,
        rules: Optional[RulesConfig] = None,
    ):
        self.root = Path(root)
        config = config or {}
        self.layout = LandscapeLayout.from_config(config)
        self.rules = rules or RulesConfig.from_dict(config.get("rules", {}))

    def read(self) -> LandscapeScan:
        """Scan the landscape. Raises LandscapeNotFound for a missing root."""
        return LandscapeReader(self.root, self.layout).read()

    def validate(self) -> ValidationResult:
        """Scan and validate the landscape."""
        return self.validate_scan(self.read())

    def validate_scan(self, scan: LandscapeScan) -> ValidationResult:
        """
        Run all phases over an existing scan.

        Args:
            scan: Result of ``LandscapeReader.read()``

        Returns:
            ValidationResult with issues in phase order and record counts
        """
        ctx = ValidationContext()

        self.check_structure(scan, ctx)
        self.check_identity(scan, ctx)
        self.check_references(scan, ctx)
        self.check_sequences(scan, ctx)

        if self.rules.check_capability_hierarchy:
            self.check_capability_hierarchy(scan, ctx)
        if self.rules.check_data_entity_references:
            self.check_data_entity_references(scan, ctx)
        if self.rules.check_integration_references:
            self.check_integration_references(scan, ctx)

        issues = [i for i in ctx.issues if not self.rules.is_skipped(i)]
        if len(issues) != len(ctx.issues):
            logger.debug("Skipped %d issues by code", len(ctx.issues) - len(issues))

        result = ValidationResult(issues=issues, stats=ctx.stats)
        logger.debug(
            "Validation of %s finished: %d errors, %d warnings",
            scan.root,
            len(result.errors),
            len(result.warnings),
        )
        return result

    # -- Phase 1 -----------------------------------------------------------

    def check_structure(self, scan: LandscapeScan, ctx: ValidationContext) -> None:
        """Collect read/schema issues and count parsed records."""
        for source in scan.files:
            for issue in source.issues:
                ctx.report(issue)

        stats = ctx.stats
        stats.domains = sum(1 for _ in scan.parsed(RecordKind.DOMAIN))
        stats.applications = sum(1 for _ in scan.parsed(RecordKind.APPLICATION))
        stats.data_entities = sum(1 for _ in scan.parsed(RecordKind.DATA_ENTITY))
        stats.change_requests = sum(1 for _ in scan.parsed(RecordKind.CHANGE_REQUEST))
        stats.capabilities = sum(
            len(source.record.capabilities)
            for source in scan.parsed(RecordKind.CAPABILITY_REGISTRY)
        )
        logger.debug("Phase 1 (structure): %d issues", len(ctx.issues))

    # -- Phase 2 -----------------------------------------------------------

    def check_identity(self, scan: LandscapeScan, ctx: ValidationContext) -> None:
        """Register ids in traversal order and compare locations with ids."""
        for source in scan.files:
            if not source.ok:
                continue
            kind = source.kind
            if kind == RecordKind.DOMAIN:
                self._check_placement(source, ctx)
            elif kind in (RecordKind.APPLICATION, RecordKind.CHANGE_REQUEST):
                ctx.register(source.record.id, source.rel_path)
                self._check_placement(source, ctx)
                if kind == RecordKind.APPLICATION:
                    self._check_passport_domain(source, ctx)
            elif kind == RecordKind.CAPABILITY_REGISTRY:
                for capability in source.record.capabilities:
                    ctx.register(capability.id, source.rel_path)
            elif kind == RecordKind.DATA_ENTITY:
                ctx.register(source.record.id, source.rel_path)
                self._check_entity_file_name(source, ctx)
        logger.debug("Phase 2 (identity): %d ids registered", len(ctx.registry))

    def _check_placement(self, source: SourceFile, ctx: ValidationContext) -> None:
        declared = source.record.id
        folder = source.expected_id
        if folder is not None and folder != declared:
            noun = _PLACEMENT_NOUNS[source.kind]
            ctx.report(
                error(
                    source.rel_path,
                    f"Folder name '{folder}' does not match {noun} ID '{declared}'",
                    IssueCode.PLACEMENT_MISMATCH,
                )
            )

    def _check_passport_domain(self, source: SourceFile, ctx: ValidationContext) -> None:
        passport = source.record
        id_domain = parse_id(passport.id).domain
        if id_domain != passport.domain:
            ctx.report(
                error(
                    source.rel_path,
                    f"Domain '{passport.domain}' does not match domain '{id_domain}' "
                    f"of passport ID '{passport.id}'",
                    IssueCode.PLACEMENT_MISMATCH,
                )
            )

    def _check_entity_file_name(self, source: SourceFile, ctx: ValidationContext) -> None:
        # Free-form file names (customer.yaml) carry no identity
        stem = source.path.name.removesuffix(self.layout.record_suffix)
        declared = source.record.id
        if is_valid_id(stem) and stem != declared:
            ctx.report(
                error(
                    source.rel_path,
                    f"File name '{stem}' does not match data entity ID '{declared}'",
                    IssueCode.PLACEMENT_MISMATCH,
                )
            )

    # -- Phase 3 -----------------------------------------------------------

    def check_references(self, scan: LandscapeScan, ctx: ValidationContext) -> None:
        """Warn about change requests referencing unknown applications."""
        for source in scan.parsed(RecordKind.CHANGE_REQUEST):
            for app_id in source.record.referenced_applications:
                if not ctx.knows(app_id):
                    ctx.report(
                        warning(
                            source.rel_path,
                            f"Referenced application '{app_id}' not found in landscape",
                            IssueCode.UNRESOLVED_REFERENCE,
                        )
                    )
        logger.debug("Phase 3 (references) done")

    # -- Phase 4 -----------------------------------------------------------

    def check_sequences(self, scan: LandscapeScan, ctx: ValidationContext) -> None:
        """Report registered ids whose sequence is beyond the stored counter."""
        source = scan.first(RecordKind.ID_SEQUENCES)
        if source is None or not source.ok:
            logger.debug("Phase 4 (sequences) skipped: no usable counter file")
            return

        sequences = source.record.root
        for entity_id in ctx.registry:
            try:
                parsed = parse_id(entity_id)
            except MalformedIdentifier:
                continue
            counter = sequences.get(parsed.domain, {}).get(parsed.type.value)
            if counter is not None and parsed.sequence > counter:
                ctx.report(
                    error(
                        source.rel_path,
                        f"ID '{entity_id}' has sequence {parsed.sequence} "
                        f"but counter is only at {counter}",
                        IssueCode.SEQUENCE_EXCEEDED,
                    )
                )
        logger.debug("Phase 4 (sequences) done")

    # -- Optional rules ----------------------------------------------------

    def check_capability_hierarchy(self, scan: LandscapeScan, ctx: ValidationContext) -> None:
        """Check parent/children agreement and cycles in the capability tree."""
        for source in scan.parsed(RecordKind.CAPABILITY_REGISTRY):
            capabilities: Dict[str, Capability] = {c.id: c for c in source.record.capabilities}
            file = source.rel_path

            def inconsistent(message: str) -> None:
                ctx.report(warning(file, message, IssueCode.HIERARCHY_INCONSISTENT))

            for cap in capabilities.values():
                if cap.parent is not None:
                    parent = capabilities.get(cap.parent)
                    if parent is None:
                        inconsistent(f"Capability '{cap.id}' has unknown parent '{cap.parent}'")
                    elif cap.id not in parent.children:
                        inconsistent(
                            f"Capability '{cap.id}' names parent '{parent.id}' "
                            f"but '{parent.id}' does not list it as a child"
                        )
                for child_id in cap.children:
                    child = capabilities.get(child_id)
                    if child is None:
                        inconsistent(f"Capability '{cap.id}' lists unknown child '{child_id}'")
                    elif child.parent != cap.id:
                        inconsistent(
                            f"Capability '{cap.id}' lists child '{child_id}' "
                            f"whose parent is '{child.parent}'"
                        )

            reported = set()
            for cap_id in capabilities:
                cycle = _find_parent_cycle(cap_id, capabilities)
                if cycle and frozenset(cycle) not in reported:
                    reported.add(frozenset(cycle))
                    inconsistent(f"Circular capability hierarchy: {' -> '.join(cycle)}")

    def check_data_entity_references(self, scan: LandscapeScan, ctx: ValidationContext) -> None:
        """Warn about data entity application maps naming unknown applications."""
        for source in scan.parsed(RecordKind.DATA_ENTITY):
            entity = source.record
            for app_id in entity.applications:
                if not ctx.knows(app_id):
                    ctx.report(
                        warning(
                            source.rel_path,
                            f"Data entity '{entity.id}' references application "
                            f"'{app_id}' not found in landscape",
                            IssueCode.UNRESOLVED_REFERENCE,
                        )
                    )

    def check_integration_references(self, scan: LandscapeScan, ctx: ValidationContext) -> None:
        """Warn about integration endpoints that are not known applications."""
        for source in scan.parsed(RecordKind.INTEGRATION_REGISTRY):
            for entry in source.record.integrations:
                for app_id in dict.fromkeys((entry.source, entry.target)):
                    if not ctx.knows(app_id):
                        ctx.report(
                            warning(
                                source.rel_path,
                                f"Integration {entry.source} -> {entry.target} references "
                                f"application '{app_id}' not found in landscape",
                                IssueCode.UNRESOLVED_REFERENCE,
                            )
                        )
        for source in scan.parsed(RecordKind.APPLICATION):
            passport = source.record
            for integration in passport.integrations:
                if not ctx.knows(integration.target):
                    ctx.report(
                        warning(
                            source.rel_path,
                            f"Integration target '{integration.target}' of "
                            f"'{passport.id}' not found in landscape",
                            IssueCode.UNRESOLVED_REFERENCE,
                        )
                    )


def _find_parent_cycle(start: str, capabilities: Dict[str, Capability]) -> Optional[List[str]]:
    """Follow parent links from start; return the cycle if one is reached."""
    path: List[str] = []
    current: Optional[str] = start
    while current is not None and current in capabilities:
        if current in path:
            return path[path.index(current):] + [current]
        path.append(current)
        current = capabilities[current].parent
    return None


def validate_landscape(
    root: Path, config: Optional[Mapping[str, Any]] = None
) -> ValidationResult:
    """
    Validate the landscape at root.

    Args:
        root: Landscape directory
        config: Tool configuration (``[layout]`` and ``[rules]`` are used)

    Returns:
        ValidationResult; ``valid`` is False iff an error-severity issue exists

    Raises:
        LandscapeNotFound: If root is not a directory
    """
    return LandscapeValidator(root, config).validate()
