"""
archiclaw.core.snapshot - In-memory landscape snapshot and JSON bundle.

A ``Landscape`` holds the successfully parsed records of one validation run
together with its result. It is what query accessors and the API server
read; it can be written to, and restored from, a single JSON bundle.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from archiclaw.core.loader import LandscapeScan
from archiclaw.core.models import (
    ApplicationPassport,
    ApplicationRegistryEntry,
    Capability,
    ChangeRequest,
    DataEntity,
    DomainDefinition,
    IntegrationEntry,
    RecordKind,
    to_plain,
)
from archiclaw.core.rules import ValidationResult
from archiclaw.core.validator import LandscapeValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Landscape:
    """
    Validated landscape content, immutable once built.

    Attributes:
        domains: Domain definitions in folder order
        applications: Passports by id (first occurrence of an id wins)
        application_list: Entries of the application registry
        capabilities: Capabilities of the capability registry
        integrations: Entries of the integration registry
        data_entities: Data entities in file order
        change_requests: Change requests in folder order
        validation: Result of the run the snapshot was built from
    """

    domains: List[DomainDefinition] = field(default_factory=list)
    applications: Dict[str, ApplicationPassport] = field(default_factory=dict)
    application_list: List[ApplicationRegistryEntry] = field(default_factory=list)
    capabilities: List[Capability] = field(default_factory=list)
    integrations: List[IntegrationEntry] = field(default_factory=list)
    data_entities: List[DataEntity] = field(default_factory=list)
    change_requests: List[ChangeRequest] = field(default_factory=list)
    validation: ValidationResult = field(default_factory=ValidationResult)

    @classmethod
    def load(cls, root: Path, config: Optional[Mapping[str, Any]] = None) -> "Landscape":
        """
        Validate the landscape at root and build a snapshot of it.

        Files that failed schema validation are left out; the returned
        snapshot always carries the full validation result.

        Raises:
            LandscapeNotFound: If root is not a directory
        """
        validator = LandscapeValidator(root, config)
        scan = validator.read()
        result = validator.validate_scan(scan)
        return cls.from_scan(scan, result)

    @classmethod
    def from_scan(cls, scan: LandscapeScan, result: ValidationResult) -> "Landscape":
        domains: List[DomainDefinition] = []
        applications: Dict[str, ApplicationPassport] = {}
        application_list: List[ApplicationRegistryEntry] = []
        capabilities: List[Capability] = []
        integrations: List[IntegrationEntry] = []
        data_entities: List[DataEntity] = []
        change_requests: List[ChangeRequest] = []

        for source in scan.files:
            if not source.ok:
                continue
            record = source.record
            kind = source.kind
            if kind == RecordKind.DOMAIN:
                domains.append(record)
            elif kind == RecordKind.APPLICATION:
                applications.setdefault(record.id, record)
            elif kind == RecordKind.APPLICATION_REGISTRY:
                application_list.extend(record.applications)
            elif kind == RecordKind.CAPABILITY_REGISTRY:
                capabilities.extend(record.capabilities)
            elif kind == RecordKind.INTEGRATION_REGISTRY:
                integrations.extend(record.integrations)
            elif kind == RecordKind.DATA_ENTITY:
                data_entities.append(record)
            elif kind == RecordKind.CHANGE_REQUEST:
                change_requests.append(record)

        return cls(
            domains=domains,
            applications=applications,
            application_list=application_list,
            capabilities=capabilities,
            integrations=integrations,
            data_entities=data_entities,
            change_requests=change_requests,
            validation=result,
        )

    def stats(self) -> Dict[str, int]:
        """Collection sizes of the snapshot."""
        return {
            "applications": len(self.applications),
            "domains": len(self.domains),
            "capabilities": len(self.capabilities),
            "integrations": len(self.integrations),
            "dataEntities": len(self.data_entities),
            "changeRequests": len(self.change_requests),
        }

    def to_bundle(self) -> Dict[str, Any]:
        """Serialize to the bundle structure (plain JSON-compatible data)."""
        return {
            "domains": [to_plain(d) for d in self.domains],
            "applications": {app_id: to_plain(app) for app_id, app in self.applications.items()},
            "applicationList": [to_plain(e) for e in self.application_list],
            "capabilities": [to_plain(c) for c in self.capabilities],
            "integrations": [to_plain(i) for i in self.integrations],
            "dataEntities": [to_plain(e) for e in self.data_entities],
            "changeRequests": [to_plain(c) for c in self.change_requests],
            "stats": self.stats(),
            "validationResult": self.validation.to_dict(),
        }

    def write_bundle(self, path: Path) -> Path:
        """Write the bundle as indented JSON, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(self.to_bundle(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        logger.info("Wrote bundle %s", path)
        return path

    @classmethod
    def from_bundle_data(cls, data: Mapping[str, Any]) -> "Landscape":
        """
        Rebuild a snapshot from bundle data.

        Raises:
            pydantic.ValidationError: If a bundled record violates its schema
        """
        applications = {
            app_id: ApplicationPassport.model_validate(app)
            for app_id, app in data.get("applications", {}).items()
        }
        return cls(
            domains=[DomainDefinition.model_validate(d) for d in data.get("domains", [])],
            applications=applications,
            application_list=[
                ApplicationRegistryEntry.model_validate(e) for e in data.get("applicationList", [])
            ],
            capabilities=[Capability.model_validate(c) for c in data.get("capabilities", [])],
            integrations=[
                IntegrationEntry.model_validate(i) for i in data.get("integrations", [])
            ],
            data_entities=[DataEntity.model_validate(e) for e in data.get("dataEntities", [])],
            change_requests=[
                ChangeRequest.model_validate(c) for c in data.get("changeRequests", [])
            ],
            validation=ValidationResult.from_dict(data.get("validationResult", {})),
        )

    @classmethod
    def from_bundle(cls, path: Path) -> "Landscape":
        """
        Load a bundle file written by ``write_bundle``.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the content is not valid JSON or a record is
                invalid (``pydantic.ValidationError`` is a ``ValueError``)
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Not a landscape bundle: {path}")
        return cls.from_bundle_data(data)
