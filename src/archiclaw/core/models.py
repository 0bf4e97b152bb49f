"""
archiclaw.core.models - Typed schemas for landscape records.

One strict pydantic model per record kind. Unknown fields are rejected so
that typos in hand-edited YAML surface as schema violations. ``SCHEMAS`` maps
each ``RecordKind`` to its model; the reader and validator dispatch through
it and nothing else.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError

from archiclaw.core.ids import (
    ApplicationId,
    CapabilityId,
    ChangeRequestId,
    DataEntityId,
    DomainId,
    SequenceMap,
)

AppStatus = Literal["plan", "build", "run", "retire"]
TogafLayer = Literal["business", "application", "technology"]
HostingModel = Literal["on-premise", "cloud", "hybrid", "saas"]
DataClassification = Literal["public", "internal", "confidential", "restricted"]
IntegrationType = Literal["api", "file", "event", "database", "manual"]
IntegrationDirection = Literal["inbound", "outbound", "bidirectional"]
DataOperation = Literal["M", "C", "R", "U", "D", "S"]
DataRole = Literal["master", "consumer", "producer", "store"]
ChangeStatus = Literal["draft", "review", "approved", "rejected", "implemented"]
Level = Literal["low", "medium", "high"]
DecisionTier = Literal["eac", "peer", "individual"]
DiagramType = Literal[
    "arch-change", "context-c4", "capability-impact", "data-flow", "current-vs-target"
]
AdrStatus = Literal["proposed", "accepted", "deprecated", "superseded"]

NonEmptyStr = Annotated[str, Field(min_length=1)]


class StrictModel(BaseModel):
    """Base for all landscape records: unknown keys are errors."""

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------


class DomainDefinition(StrictModel):
    id: DomainId
    name: NonEmptyStr
    description: str
    lead: str
    capabilities: List[CapabilityId]
    applications: List[ApplicationId]


class DomainRegistryEntry(StrictModel):
    id: DomainId
    name: NonEmptyStr
    lead: str


class DomainRegistry(StrictModel):
    domains: List[DomainRegistryEntry]


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class ApplicationIntegration(StrictModel):
    """Outbound integration declared on a passport."""

    target: ApplicationId
    type: IntegrationType
    direction: IntegrationDirection
    protocol: str


class Owners(StrictModel):
    business: str
    technical: str


class TechnologyProfile(StrictModel):
    stack: List[str]
    hosting: HostingModel
    data_classification: DataClassification


class Sla(StrictModel):
    availability: str
    rpo: str
    rto: str


class ApplicationPassport(StrictModel):
    """Detailed profile of a single application."""

    id: ApplicationId
    name: NonEmptyStr
    domain: DomainId
    status: AppStatus
    togaf_layer: TogafLayer
    owners: Owners
    technology: TechnologyProfile
    integrations: List[ApplicationIntegration]
    compliance: List[str]
    sla: Sla
    # ISO date strings, kept verbatim
    created: str
    updated: str


class ApplicationRegistryEntry(StrictModel):
    id: ApplicationId
    name: NonEmptyStr
    domain: DomainId


class ApplicationRegistry(StrictModel):
    applications: List[ApplicationRegistryEntry]


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


class Capability(StrictModel):
    """Node of the L0 (strategic) to L4 (atomic) capability hierarchy."""

    id: CapabilityId
    name: NonEmptyStr
    domain: DomainId
    description: str
    parent: Optional[CapabilityId] = None
    level: int = Field(ge=0, le=4, strict=True)
    children: List[CapabilityId]


class CapabilityRegistry(StrictModel):
    capabilities: List[Capability]


# ---------------------------------------------------------------------------
# Data entities
# ---------------------------------------------------------------------------


class AppDataMapping(StrictModel):
    operations: List[DataOperation]
    role: DataRole


class DataEntity(StrictModel):
    id: DataEntityId
    name: NonEmptyStr
    domain: DomainId
    description: str
    applications: Dict[ApplicationId, AppDataMapping]


class DataEntityRegistryEntry(StrictModel):
    id: DataEntityId
    name: NonEmptyStr
    domain: DomainId


class DataEntityRegistry(StrictModel):
    entities: List[DataEntityRegistryEntry]


# ---------------------------------------------------------------------------
# Integrations
# ---------------------------------------------------------------------------


class IntegrationEntry(StrictModel):
    source: ApplicationId
    target: ApplicationId
    type: IntegrationType
    direction: IntegrationDirection
    protocol: str
    description: str


class IntegrationRegistry(StrictModel):
    integrations: List[IntegrationEntry]


# ---------------------------------------------------------------------------
# Change requests and ADRs
# ---------------------------------------------------------------------------


class DiagramArtifact(StrictModel):
    type: DiagramType
    file: str  # relative path to a .mmd file


class Impact(StrictModel):
    cost: Level
    risk: Level
    data_sensitivity: DataClassification
    affected_systems_count: int = Field(ge=0, strict=True)
    recommended_tier: DecisionTier


class ChangeApplications(StrictModel):
    primary: ApplicationId
    affected: List[ApplicationId]


class Artifacts(StrictModel):
    diagrams: List[DiagramArtifact]
    data_matrix: str
    adr: str


class PushTargets(StrictModel):
    jira_issue: str
    confluence_page: str


class ChangeRequest(StrictModel):
    id: ChangeRequestId
    title: NonEmptyStr
    domain: DomainId
    status: ChangeStatus
    created: str
    author: str
    applications: ChangeApplications
    capabilities_affected: List[CapabilityId]
    impact: Impact
    decision_tier: DecisionTier
    artifacts: Artifacts
    push: PushTargets

    @property
    def referenced_applications(self) -> List[str]:
        """Primary application followed by the affected ones."""
        return [self.applications.primary, *self.applications.affected]


class AdrMetadata(StrictModel):
    change_id: ChangeRequestId
    title: NonEmptyStr
    date: str
    status: AdrStatus
    applications_affected: List[ApplicationId]
    capabilities_affected: List[CapabilityId]
    supersedes: Optional[ChangeRequestId] = None
    superseded_by: Optional[ChangeRequestId] = None


# ---------------------------------------------------------------------------
# Landscape configuration
# ---------------------------------------------------------------------------


class OrganizationSettings(BaseModel):
    """Organization settings in `.archiclaw/config.yaml`. Free-form mapping."""

    model_config = ConfigDict(extra="allow", frozen=True)

    name: Optional[str] = None


class IdSequencesDocument(RootModel[SequenceMap]):
    """Counter file content: `{DOMAIN: {TYPE: highest_allocated}}`."""


# ---------------------------------------------------------------------------
# Kind dispatch
# ---------------------------------------------------------------------------


class RecordKind(str, Enum):
    """Every file kind found in a landscape."""

    ORGANIZATION = "organization"
    ID_SEQUENCES = "id-sequences"
    DOMAIN_REGISTRY = "domain-registry"
    DOMAIN = "domain"
    APPLICATION_REGISTRY = "application-registry"
    APPLICATION = "application"
    CAPABILITY_REGISTRY = "capability-registry"
    DATA_ENTITY_REGISTRY = "data-entity-registry"
    DATA_ENTITY = "data-entity"
    INTEGRATION_REGISTRY = "integration-registry"
    CHANGE_REQUEST = "change-request"
    ADR = "adr"


SCHEMAS: Dict[RecordKind, Type[BaseModel]] = {
    RecordKind.ORGANIZATION: OrganizationSettings,
    RecordKind.ID_SEQUENCES: IdSequencesDocument,
    RecordKind.DOMAIN_REGISTRY: DomainRegistry,
    RecordKind.DOMAIN: DomainDefinition,
    RecordKind.APPLICATION_REGISTRY: ApplicationRegistry,
    RecordKind.APPLICATION: ApplicationPassport,
    RecordKind.CAPABILITY_REGISTRY: CapabilityRegistry,
    RecordKind.DATA_ENTITY_REGISTRY: DataEntityRegistry,
    RecordKind.DATA_ENTITY: DataEntity,
    RecordKind.INTEGRATION_REGISTRY: IntegrationRegistry,
    RecordKind.CHANGE_REQUEST: ChangeRequest,
    RecordKind.ADR: AdrMetadata,
}


def validate_record(kind: RecordKind, data: Any) -> BaseModel:
    """
    Validate raw data against the schema for its kind.

    Args:
        kind: Record kind
        data: Parsed YAML content

    Returns:
        Typed, immutable model instance

    Raises:
        pydantic.ValidationError: If the data violates the schema
    """
    return SCHEMAS[kind].model_validate(data)


def describe_validation_error(err: ValidationError) -> str:
    """Render a pydantic error as ``loc: message`` entries joined by '; '."""
    parts = []
    for error in err.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def to_plain(record: BaseModel) -> Dict[str, Any]:
    """Dump a record to plain data, omitting unset optional fields."""
    return record.model_dump(mode="json", exclude_none=True)
