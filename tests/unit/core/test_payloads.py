"""Tests for submission and review payload validation."""

from decimal import Decimal

import pytest

from portal.core.approval.entities import get_entity_config
from portal.core.approval.payloads import (
    FundingChanges,
    FundingCreate,
    IPRecordCreate,
    PledgeRequest,
    ProjectChanges,
    ProjectCreate,
    parse_payload,
    unknown_identification_keys,
)
from portal.core.errors import ValidationError


class TestParsePayload:

    def test_none_is_empty_object(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(ProjectCreate, None)
        assert "title" in exc_info.value.message

    def test_non_object_rejected(self):
        with pytest.raises(ValidationError, match="JSON object"):
            parse_payload(ProjectCreate, ["title"])

    def test_missing_required_fields_listed(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(ProjectCreate, {"title": "X"})
        assert "description" in exc_info.value.message
        assert "category" in exc_info.value.message

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            parse_payload(ProjectCreate, {"title": "   ", "description": "d", "category": "c"})

    def test_create_ignores_workflow_fields(self):
        project = parse_payload(ProjectCreate, {
            "title": " X ",
            "description": "d",
            "category": "c",
            "approval_status": "approved",
            "owner_id": 99,
        })
        data = project.model_dump()
        assert data["title"] == "X"
        assert "approval_status" not in data
        assert "owner_id" not in data


class TestAmounts:

    @pytest.mark.parametrize("amount", [
        0, -1, "0", "-5.5", "NaN", "nan", "Infinity", "abc", "", True, None,
        "0.001", "10.005", "1E-3", "10000000000000", 10 ** 15,
    ])
    def test_invalid_amounts(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(FundingCreate, {"title": "T", "description": "D", "amount": amount})
        assert exc_info.value.message.startswith("amount:")

    @pytest.mark.parametrize("amount,expected", [
        (500000, Decimal("500000")),
        ("300000.50", Decimal("300000.50")),
        (0.01, Decimal("0.01")),
        ("1.500", Decimal("1.5")),
        ("9999999999999.99", Decimal("9999999999999.99")),
    ])
    def test_valid_amounts(self, amount, expected):
        funding = parse_payload(FundingCreate, {"title": "T", "description": "D", "amount": amount})
        assert funding.amount == expected

    def test_funding_defaults(self):
        funding = parse_payload(FundingCreate, {"title": "T", "description": "D", "amount": 1})
        assert funding.currency == "TZS"
        assert funding.grant_type == "research"
        assert funding.project_id is None

    def test_currency_normalized(self):
        funding = parse_payload(FundingCreate, {"title": "T", "description": "D", "amount": 1, "currency": "usd"})
        assert funding.currency == "USD"

    def test_project_funding_needed_optional_but_positive(self):
        assert parse_payload(ProjectCreate, {"title": "T", "description": "D", "category": "C"}).funding_needed is None
        with pytest.raises(ValidationError):
            parse_payload(ProjectCreate, {"title": "T", "description": "D", "category": "C", "funding_needed": -10})

    def test_pledge_amount(self):
        assert parse_payload(PledgeRequest, {"amount": "2500"}).amount == Decimal("2500")
        with pytest.raises(ValidationError):
            parse_payload(PledgeRequest, {"amount": 0})


class TestIPRecordPayload:

    def test_valid_patent(self):
        record = parse_payload(IPRecordCreate, {
            "ip_type": "patent",
            "title": "T",
            "abstract": "A",
            "identification_numbers": {"patent_number": "TZ 123"},
        })
        assert record.ip_type == "patent"
        assert record.identification_numbers == {"patent_number": "TZ 123"}

    def test_unknown_ip_type(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(IPRecordCreate, {"ip_type": "recipe", "title": "T", "abstract": "A"})
        assert exc_info.value.message.startswith("ip_type:")

    def test_identification_numbers_must_match_type(self):
        with pytest.raises(ValidationError, match="trademark_reg_number"):
            parse_payload(IPRecordCreate, {
                "ip_type": "patent",
                "title": "T",
                "abstract": "A",
                "identification_numbers": {"trademark_reg_number": "X"},
            })

    def test_trl_range(self):
        with pytest.raises(ValidationError):
            parse_payload(IPRecordCreate, {"ip_type": "design", "title": "T", "abstract": "A", "trl": 10})

    def test_unknown_identification_keys(self):
        assert unknown_identification_keys("copyright", {"copyright_type": "x", "patent_number": "y"}) == ["patent_number"]
        assert unknown_identification_keys("patent", None) == []


class TestChangePayloads:

    def test_only_supplied_fields_are_changes(self):
        changes = parse_payload(FundingChanges, {"amount": 300000}).changes()
        assert changes == {"amount": Decimal("300000")}

    def test_workflow_fields_not_editable(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(ProjectChanges, {"approval_status": "approved"})
        assert exc_info.value.message == "approval_status: is not an editable field"

    def test_required_field_cannot_be_nulled(self):
        with pytest.raises(ValidationError, match="title cannot be empty"):
            parse_payload(ProjectChanges, {"title": None})

    def test_optional_field_may_be_cleared(self):
        assert parse_payload(ProjectChanges, {"institution": None}).changes() == {"institution": None}

    def test_entity_configs(self):
        assert get_entity_config("funding_application").label == "Funding Application"
        assert get_entity_config("project").link_for(7) == "/projects/7"
        assert get_entity_config("ip_record").secondary_values is None
        with pytest.raises(ValidationError):
            get_entity_config("grant")
