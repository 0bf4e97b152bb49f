"""Tests for read-only landscape accessors."""

from archiclaw.core import query
from archiclaw.core.query import LandscapeQuery
from archiclaw.core.snapshot import Landscape
from tests.landscape_helpers import (
    make_capability,
    make_change_request,
    seed_capabilities,
    write_capabilities,
    write_change_request,
)


class TestLookups:
    def test_get_application(self, seed_landscape):
        app = query.get_application(seed_landscape, "FIN-APP-001")
        assert app is not None
        assert app.domain == "FIN"
        assert query.get_application(seed_landscape, "FIN-APP-999") is None

    def test_get_application_is_exact(self, seed_landscape):
        assert query.get_application(seed_landscape, "fin-app-001") is None

    def test_get_domain_case_insensitive(self, seed_landscape):
        assert query.get_domain(seed_landscape, "fin").id == "FIN"
        assert query.get_domain(seed_landscape, "XYZ") is None


class TestByDomain:
    def test_applications_by_domain(self, seed_landscape):
        apps = query.get_applications_by_domain(seed_landscape, "hr")
        assert [a.id for a in apps] == ["HR-APP-001"]

    def test_capabilities_by_domain(self, seed_landscape):
        caps = query.get_capabilities_by_domain(seed_landscape, "Ops")
        assert [c.id for c in caps] == ["OPS-CAP-001", "OPS-CAP-002"]

    def test_data_entities_by_domain(self, seed_landscape):
        entities = query.get_data_entities_by_domain(seed_landscape, "crm")
        assert [e.id for e in entities] == ["CRM-ENT-001"]

    def test_unknown_domain_is_empty(self, seed_landscape):
        assert query.get_applications_by_domain(seed_landscape, "NONE") == []


class TestIntegrations:
    def test_for_app_source_or_target(self, seed_landscape):
        found = query.get_integrations_for_app(seed_landscape, "FIN-APP-001")
        assert [(i.source, i.target) for i in found] == [
            ("FIN-APP-001", "CRM-APP-001"),
            ("HR-APP-001", "FIN-APP-001"),
        ]

    def test_between_either_orientation(self, seed_landscape):
        forward = query.get_integrations_between(seed_landscape, "FIN-APP-001", "CRM-APP-001")
        backward = query.get_integrations_between(seed_landscape, "CRM-APP-001", "FIN-APP-001")
        assert forward == backward
        assert len(forward) == 1

    def test_between_unconnected(self, seed_landscape):
        assert query.get_integrations_between(seed_landscape, "HR-APP-001", "OPS-APP-001") == []


class TestDataEntitiesForApp:
    def test_membership_in_application_map(self, seed_landscape):
        entities = query.get_data_entities_for_app(seed_landscape, "OPS-APP-001")
        assert [e.id for e in entities] == ["OPS-ENT-001"]
        assert query.get_data_entities_for_app(seed_landscape, "ZZ-APP-001") == []


class TestChangeRequests:
    def test_primary_or_affected(self, landscape_root):
        write_change_request(
            landscape_root, make_change_request("TST-ACR-001", "TST-APP-001", ["FIN-APP-001"])
        )
        write_change_request(landscape_root, make_change_request("TST-ACR-002", "FIN-APP-001"))
        landscape = Landscape.load(landscape_root)
        ids = [c.id for c in query.get_change_requests_for_app(landscape, "FIN-APP-001")]
        assert ids == ["TST-ACR-001", "TST-ACR-002"]
        ids = [c.id for c in query.get_change_requests_for_app(landscape, "TST-APP-001")]
        assert ids == ["TST-ACR-001"]


class TestCapabilityTree:
    def test_children(self, seed_landscape):
        children = query.get_capability_children(seed_landscape, "FIN-CAP-001")
        assert [c.id for c in children] == ["FIN-CAP-002"]
        assert query.get_capability_children(seed_landscape, "FIN-CAP-002") == []
        assert query.get_capability_children(seed_landscape, "NOPE-CAP-001") == []

    def test_ancestors(self, landscape_root):
        caps = seed_capabilities() + [
            make_capability("FIN-CAP-003", level=2, parent="FIN-CAP-002"),
        ]
        write_capabilities(landscape_root, caps)
        landscape = Landscape.load(landscape_root)
        ancestors = query.get_capability_ancestors(landscape, "FIN-CAP-003")
        assert [c.id for c in ancestors] == ["FIN-CAP-002", "FIN-CAP-001"]

    def test_ancestors_stop_on_cycle(self, landscape_root):
        write_capabilities(
            landscape_root,
            [
                make_capability("FIN-CAP-001", level=1, parent="FIN-CAP-002"),
                make_capability("FIN-CAP-002", level=1, parent="FIN-CAP-001"),
            ],
        )
        landscape = Landscape.load(landscape_root)
        ancestors = query.get_capability_ancestors(landscape, "FIN-CAP-001")
        assert [c.id for c in ancestors] == ["FIN-CAP-002"]


class TestSearch:
    def test_case_insensitive_across_kinds(self, seed_landscape):
        results = query.search(seed_landscape, "FINANCE")
        assert [d.id for d in results.domains] == ["FIN"]
        assert results.applications == []

    def test_application_stack(self, seed_landscape):
        results = query.search(seed_landscape, "kafka")
        assert [a.id for a in results.applications] == ["OPS-APP-001"]
        assert [i.protocol for i in results.integrations] == ["Kafka"]

    def test_buckets_are_independent(self, seed_landscape):
        results = query.search(seed_landscape, "fin-")
        assert [a.id for a in results.applications] == ["FIN-APP-001"]
        assert [c.id for c in results.capabilities] == ["FIN-CAP-001", "FIN-CAP-002"]
        assert [e.id for e in results.data_entities] == ["FIN-ENT-001"]
        assert len(results.integrations) == 2

    def test_no_match(self, seed_landscape):
        results = query.search(seed_landscape, "no such thing")
        assert results.total == 0
        assert results.to_dict() == {
            "applications": [],
            "domains": [],
            "capabilities": [],
            "dataEntities": [],
            "integrations": [],
        }


class TestLandscapeQuery:
    def test_wrapper_delegates(self, seed_landscape):
        q = LandscapeQuery(seed_landscape)
        assert q.get_application("TST-APP-001").id == "TST-APP-001"
        assert q.get_domain("tst").id == "TST"
        assert q.summary() == {
            "stats": {
                "applications": 5,
                "domains": 5,
                "capabilities": 10,
                "integrations": 3,
                "dataEntities": 5,
                "changeRequests": 0,
            },
            "valid": True,
        }
