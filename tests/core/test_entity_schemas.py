"""Tests for per-kind record schemas and kind dispatch."""

import pytest
from pydantic import ValidationError

from archiclaw.core.models import (
    SCHEMAS,
    AdrMetadata,
    ApplicationPassport,
    Capability,
    ChangeRequest,
    RecordKind,
    describe_validation_error,
    to_plain,
    validate_record,
)
from tests.landscape_helpers import (
    make_capability,
    make_change_request,
    make_data_entity,
    make_domain,
    make_passport,
)


class TestKindDispatch:
    """Tests for the RecordKind -> schema registry."""

    def test_every_kind_has_a_schema(self):
        assert set(SCHEMAS) == set(RecordKind)

    def test_validate_record_returns_typed_model(self):
        record = validate_record(RecordKind.APPLICATION, make_passport("FIN-APP-001"))
        assert isinstance(record, ApplicationPassport)
        assert record.technology.hosting == "cloud"

    def test_domain_definition(self):
        record = validate_record(RecordKind.DOMAIN, make_domain("FIN"))
        assert record.id == "FIN"

    def test_organization_settings_allow_any_keys(self):
        record = validate_record(RecordKind.ORGANIZATION, {"name": "Acme", "jira": {"x": 1}})
        assert record.name == "Acme"

    def test_id_sequences_document(self):
        record = validate_record(RecordKind.ID_SEQUENCES, {"FIN": {"APP": 2}})
        assert record.root == {"FIN": {"APP": 2}}


class TestApplicationPassport:
    """Tests for passport field constraints."""

    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationError):
            ApplicationPassport.model_validate(make_passport("FIN-APP-001", colour="blue"))

    def test_rejects_bad_status(self):
        with pytest.raises(ValidationError):
            ApplicationPassport.model_validate(make_passport("FIN-APP-001", status="live"))

    def test_rejects_wrong_id_type(self):
        with pytest.raises(ValidationError):
            ApplicationPassport.model_validate(make_passport("FIN-ENT-001", domain="FIN"))

    def test_rejects_non_ascii_sequence_digits(self):
        with pytest.raises(ValidationError):
            ApplicationPassport.model_validate(
                make_passport("TST-APP-\u0660\u0660\u0661", domain="TST")
            )

    def test_rejects_missing_field(self):
        data = make_passport("FIN-APP-001")
        del data["sla"]
        with pytest.raises(ValidationError) as exc_info:
            ApplicationPassport.model_validate(data)
        assert "sla" in describe_validation_error(exc_info.value)

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            ApplicationPassport.model_validate(make_passport("FIN-APP-001", name=""))

    def test_integration_target_must_be_application(self):
        data = make_passport(
            "FIN-APP-001",
            integrations=[
                {"target": "CRM-CAP-001", "type": "api", "direction": "outbound", "protocol": "REST"}
            ],
        )
        with pytest.raises(ValidationError):
            ApplicationPassport.model_validate(data)


class TestCapability:
    """Tests for capability constraints."""

    def test_parent_is_optional(self):
        cap = Capability.model_validate(make_capability("FIN-CAP-001"))
        assert cap.parent is None

    @pytest.mark.parametrize("level", [-1, 5])
    def test_level_bounds(self, level):
        with pytest.raises(ValidationError):
            Capability.model_validate(make_capability("FIN-CAP-001", level=level))

    def test_level_must_be_integer(self):
        with pytest.raises(ValidationError):
            Capability.model_validate(make_capability("FIN-CAP-001", level="2"))

    def test_to_plain_omits_missing_parent(self):
        cap = Capability.model_validate(make_capability("FIN-CAP-001"))
        assert "parent" not in to_plain(cap)


class TestDataEntity:
    """Tests for data entity application maps."""

    def test_application_keys_must_be_application_ids(self):
        data = make_data_entity("FIN-ENT-001", {"not-an-id": {"operations": ["R"], "role": "store"}})
        with pytest.raises(ValidationError):
            validate_record(RecordKind.DATA_ENTITY, data)

    def test_operations_are_restricted(self):
        data = make_data_entity("FIN-ENT-001", {"FIN-APP-001": {"operations": ["X"], "role": "store"}})
        with pytest.raises(ValidationError):
            validate_record(RecordKind.DATA_ENTITY, data)


class TestChangeRequest:
    """Tests for change request records."""

    def test_referenced_applications(self):
        cr = ChangeRequest.model_validate(
            make_change_request("FIN-ACR-001", "FIN-APP-001", ["CRM-APP-001"])
        )
        assert cr.referenced_applications == ["FIN-APP-001", "CRM-APP-001"]

    def test_negative_affected_count_rejected(self):
        data = make_change_request("FIN-ACR-001", "FIN-APP-001")
        data["impact"]["affected_systems_count"] = -1
        with pytest.raises(ValidationError):
            ChangeRequest.model_validate(data)

    def test_diagram_type_restricted(self):
        data = make_change_request("FIN-ACR-001", "FIN-APP-001")
        data["artifacts"]["diagrams"] = [{"type": "gantt", "file": "x.mmd"}]
        with pytest.raises(ValidationError):
            ChangeRequest.model_validate(data)


class TestAdrMetadata:
    """Tests for ADR metadata."""

    def test_supersedes_optional(self):
        adr = AdrMetadata.model_validate(
            {
                "change_id": "FIN-ACR-001",
                "title": "Adopt event bus",
                "date": "2024-07-01",
                "status": "accepted",
                "applications_affected": ["FIN-APP-001"],
                "capabilities_affected": [],
            }
        )
        assert adr.supersedes is None


class TestDescribeValidationError:
    """Tests for describe_validation_error."""

    def test_root_level_error(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_record(RecordKind.CAPABILITY_REGISTRY, ["not", "a", "mapping"])
        assert describe_validation_error(exc_info.value).startswith("<root>:")

    def test_nested_location(self):
        data = make_passport("FIN-APP-001")
        data["owners"] = {"business": "A"}
        with pytest.raises(ValidationError) as exc_info:
            validate_record(RecordKind.APPLICATION, data)
        assert "owners.technical" in describe_validation_error(exc_info.value)
