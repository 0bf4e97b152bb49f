"""
archiclaw.core.query - Read-only lookups over a landscape snapshot.

Every function takes a ``Landscape`` and returns records from it without
modifying or re-validating anything. Domain arguments are matched
case-insensitively by uppercasing; all other matches are exact, except
``search`` which does case-insensitive substring matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from archiclaw.core.models import (
    ApplicationPassport,
    Capability,
    ChangeRequest,
    DataEntity,
    DomainDefinition,
    IntegrationEntry,
    to_plain,
)
from archiclaw.core.snapshot import Landscape


def get_application(landscape: Landscape, app_id: str) -> Optional[ApplicationPassport]:
    return landscape.applications.get(app_id)


def get_domain(landscape: Landscape, domain_id: str) -> Optional[DomainDefinition]:
    wanted = domain_id.upper()
    for domain in landscape.domains:
        if domain.id == wanted:
            return domain
    return None


def get_applications_by_domain(landscape: Landscape, domain_id: str) -> List[ApplicationPassport]:
    wanted = domain_id.upper()
    return [app for app in landscape.applications.values() if app.domain == wanted]


def get_capabilities_by_domain(landscape: Landscape, domain_id: str) -> List[Capability]:
    wanted = domain_id.upper()
    return [cap for cap in landscape.capabilities if cap.domain == wanted]


def get_data_entities_by_domain(landscape: Landscape, domain_id: str) -> List[DataEntity]:
    wanted = domain_id.upper()
    return [entity for entity in landscape.data_entities if entity.domain == wanted]


def get_integrations_for_app(landscape: Landscape, app_id: str) -> List[IntegrationEntry]:
    """Integrations where the application is the source or the target."""
    return [i for i in landscape.integrations if app_id in (i.source, i.target)]


def get_integrations_between(
    landscape: Landscape, app_a: str, app_b: str
) -> List[IntegrationEntry]:
    """Integrations connecting two applications, in either direction."""
    return [
        i
        for i in landscape.integrations
        if (i.source == app_a and i.target == app_b) or (i.source == app_b and i.target == app_a)
    ]


def get_data_entities_for_app(landscape: Landscape, app_id: str) -> List[DataEntity]:
    return [entity for entity in landscape.data_entities if app_id in entity.applications]


def get_change_requests_for_app(landscape: Landscape, app_id: str) -> List[ChangeRequest]:
    return [cr for cr in landscape.change_requests if app_id in cr.referenced_applications]


def get_capability_children(landscape: Landscape, cap_id: str) -> List[Capability]:
    """Capabilities listed in the ``children`` of cap_id, in listed order."""
    by_id = {cap.id: cap for cap in landscape.capabilities}
    parent = by_id.get(cap_id)
    if parent is None:
        return []
    return [by_id[child] for child in dict.fromkeys(parent.children) if child in by_id]


def get_capability_ancestors(landscape: Landscape, cap_id: str) -> List[Capability]:
    """Parent chain of cap_id, nearest first. Stops at unknown ids and repeats."""
    by_id = {cap.id: cap for cap in landscape.capabilities}
    ancestors: List[Capability] = []
    seen = {cap_id}
    current = by_id.get(cap_id)
    while current is not None and current.parent is not None and current.parent not in seen:
        seen.add(current.parent)
        current = by_id.get(current.parent)
        if current is not None:
            ancestors.append(current)
    return ancestors


def _contains(query: str, *values: str) -> bool:
    return any(query in value.lower() for value in values)


@dataclass
class SearchResults:
    """One bucket of matches per entity kind."""

    applications: List[ApplicationPassport] = field(default_factory=list)
    domains: List[DomainDefinition] = field(default_factory=list)
    capabilities: List[Capability] = field(default_factory=list)
    data_entities: List[DataEntity] = field(default_factory=list)
    integrations: List[IntegrationEntry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (
            len(self.applications)
            + len(self.domains)
            + len(self.capabilities)
            + len(self.data_entities)
            + len(self.integrations)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applications": [to_plain(a) for a in self.applications],
            "domains": [to_plain(d) for d in self.domains],
            "capabilities": [to_plain(c) for c in self.capabilities],
            "dataEntities": [to_plain(e) for e in self.data_entities],
            "integrations": [to_plain(i) for i in self.integrations],
        }


def search(landscape: Landscape, query: str) -> SearchResults:
    """
    Case-insensitive substring search across all entity kinds.

    Fields searched:
        applications: id, name, domain, technology stack
        domains, capabilities, data entities: id, name, description
        integrations: source, target, description, protocol

    No ranking; each bucket keeps snapshot order.
    """
    q = query.lower()
    return SearchResults(
        applications=[
            app
            for app in landscape.applications.values()
            if _contains(q, app.id, app.name, app.domain, *app.technology.stack)
        ],
        domains=[d for d in landscape.domains if _contains(q, d.id, d.name, d.description)],
        capabilities=[
            c for c in landscape.capabilities if _contains(q, c.id, c.name, c.description)
        ],
        data_entities=[
            e for e in landscape.data_entities if _contains(q, e.id, e.name, e.description)
        ],
        integrations=[
            i
            for i in landscape.integrations
            if _contains(q, i.source, i.target, i.description, i.protocol)
        ],
    )


def summary(landscape: Landscape) -> Dict[str, Any]:
    """Snapshot counts plus the validity of the underlying run."""
    return {"stats": landscape.stats(), "valid": landscape.validation.valid}


class LandscapeQuery:
    """
    Convenience wrapper binding the accessors to one snapshot.

    Example:
        query = LandscapeQuery(Landscape.load(root))
        for app in query.get_applications_by_domain("fin"):
            print(app.id, app.name)
    """

    def __init__(self, landscape: Landscape):
        self.landscape = landscape

    def get_application(self, app_id: str) -> Optional[ApplicationPassport]:
        return get_application(self.landscape, app_id)

    def get_domain(self, domain_id: str) -> Optional[DomainDefinition]:
        return get_domain(self.landscape, domain_id)

    def get_applications_by_domain(self, domain_id: str) -> List[ApplicationPassport]:
        return get_applications_by_domain(self.landscape, domain_id)

    def get_capabilities_by_domain(self, domain_id: str) -> List[Capability]:
        return get_capabilities_by_domain(self.landscape, domain_id)

    def get_data_entities_by_domain(self, domain_id: str) -> List[DataEntity]:
        return get_data_entities_by_domain(self.landscape, domain_id)

    def get_integrations_for_app(self, app_id: str) -> List[IntegrationEntry]:
        return get_integrations_for_app(self.landscape, app_id)

    def get_integrations_between(self, app_a: str, app_b: str) -> List[IntegrationEntry]:
        return get_integrations_between(self.landscape, app_a, app_b)

    def get_data_entities_for_app(self, app_id: str) -> List[DataEntity]:
        return get_data_entities_for_app(self.landscape, app_id)

    def get_change_requests_for_app(self, app_id: str) -> List[ChangeRequest]:
        return get_change_requests_for_app(self.landscape, app_id)

    def get_capability_children(self, cap_id: str) -> List[Capability]:
        return get_capability_children(self.landscape, cap_id)

    def get_capability_ancestors(self, cap_id: str) -> List[Capability]:
        return get_capability_ancestors(self.landscape, cap_id)

    def search(self, query: str) -> SearchResults:
        return search(self.landscape, query)

    def summary(self) -> Dict[str, Any]:
        return summary(self.landscape)
