"""Validation of submitter and reviewer payloads.

Create schemas ignore unknown keys. Change schemas (edit and resubmit)
forbid them so that workflow-owned fields such as approval_status or
approved_by can never be written by an owner.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from portal.core.errors import ValidationError

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]
CurrencyCode = Annotated[
    str, StringConstraints(strip_whitespace=True, to_upper=True, min_length=3, max_length=3)
]


# Matches the Numeric(15, 2) amount columns
MAX_AMOUNT_DIGITS = 13
_CENTS = Decimal("0.01")


def _parse_positive_amount(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValueError("must be a number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError("must be a number")
    if not amount.is_finite():
        raise ValueError("must be a finite number")
    if amount <= 0:
        raise ValueError("must be greater than zero")
    if amount.adjusted() >= MAX_AMOUNT_DIGITS:
        raise ValueError(f"must have at most {MAX_AMOUNT_DIGITS} digits before the decimal point")
    if amount != amount.quantize(_CENTS):
        raise ValueError("must have at most 2 decimal places")
    return amount


PositiveAmount = Annotated[Decimal, BeforeValidator(_parse_positive_amount)]


class IPType(str, Enum):
    PATENT = "patent"
    TRADEMARK = "trademark"
    COPYRIGHT = "copyright"
    DESIGN = "design"


IDENTIFICATION_KEYS: Dict[str, FrozenSet[str]] = {
    IPType.PATENT.value: frozenset(["patent_number", "application_number"]),
    IPType.TRADEMARK.value: frozenset(["trademark_reg_number", "trademark_classification"]),
    IPType.COPYRIGHT.value: frozenset(["copyright_reg_number", "copyright_type"]),
    IPType.DESIGN.value: frozenset(["design_reg_number", "design_classification"]),
}


def unknown_identification_keys(ip_type: str, numbers: Optional[Dict[str, Any]]) -> List[str]:
    """Keys in numbers that do not belong to ip_type."""
    allowed = IDENTIFICATION_KEYS.get(ip_type, frozenset())
    return sorted(k for k in (numbers or {}) if k not in allowed)


# ---------------------------------------------------------------------------
# Create payloads
# ---------------------------------------------------------------------------

class ProjectCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: NonEmptyStr
    description: NonEmptyStr
    category: NonEmptyStr
    problem_statement: Optional[TrimmedStr] = None
    institution: Optional[TrimmedStr] = None
    funding_needed: Optional[PositiveAmount] = None


class FundingCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: NonEmptyStr
    description: NonEmptyStr
    amount: PositiveAmount
    currency: CurrencyCode = "TZS"
    grant_type: NonEmptyStr = "research"
    project_id: Optional[int] = None


class IPRecordCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    ip_type: IPType
    title: NonEmptyStr
    abstract: NonEmptyStr
    inventors: Optional[TrimmedStr] = None
    field: Optional[TrimmedStr] = None
    trl: Optional[int] = Field(default=None, ge=1, le=9)
    prior_art: Optional[TrimmedStr] = None
    identification_numbers: Dict[str, TrimmedStr] = Field(default_factory=dict)
    project_id: Optional[int] = None

    @model_validator(mode="after")
    def check_identification_numbers(self):
        unknown = unknown_identification_keys(self.ip_type, self.identification_numbers)
        if unknown:
            raise ValueError(
                f"identification numbers {', '.join(unknown)} do not apply to {self.ip_type}"
            )
        return self


# ---------------------------------------------------------------------------
# Change payloads (edit / resubmit)
# ---------------------------------------------------------------------------

class _Changes(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Columns that may be omitted but never set to null
    not_nullable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_nulls(self):
        nulled = sorted(
            name for name in self.model_fields_set
            if name in self.not_nullable and getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be empty")
        return self

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, mode="python")


class ProjectChanges(_Changes):
    not_nullable: ClassVar[FrozenSet[str]] = frozenset(["title", "description", "category"])

    title: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    category: Optional[NonEmptyStr] = None
    problem_statement: Optional[TrimmedStr] = None
    institution: Optional[TrimmedStr] = None
    funding_needed: Optional[PositiveAmount] = None


class FundingChanges(_Changes):
    not_nullable: ClassVar[FrozenSet[str]] = frozenset(["title", "description", "amount", "currency", "grant_type"])

    title: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    amount: Optional[PositiveAmount] = None
    currency: Optional[CurrencyCode] = None
    grant_type: Optional[NonEmptyStr] = None
    project_id: Optional[int] = None


class IPRecordChanges(_Changes):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    not_nullable: ClassVar[FrozenSet[str]] = frozenset(["ip_type", "title", "abstract", "identification_numbers"])

    ip_type: Optional[IPType] = None
    title: Optional[NonEmptyStr] = None
    abstract: Optional[NonEmptyStr] = None
    inventors: Optional[TrimmedStr] = None
    field: Optional[TrimmedStr] = None
    trl: Optional[int] = Field(default=None, ge=1, le=9)
    prior_art: Optional[TrimmedStr] = None
    identification_numbers: Optional[Dict[str, TrimmedStr]] = None
    project_id: Optional[int] = None


# ---------------------------------------------------------------------------
# Reviewer and side-channel payloads
# ---------------------------------------------------------------------------

class ApproveOptions(BaseModel):
    comments: Optional[TrimmedStr] = None
    amount_approved: Optional[PositiveAmount] = None


class RejectOptions(BaseModel):
    reason: Optional[str] = None


class StatusUpdate(BaseModel):
    status: NonEmptyStr


class PledgeRequest(BaseModel):
    amount: PositiveAmount
    note: Optional[TrimmedStr] = None


SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _format_error(error: Dict[str, Any]) -> str:
    loc = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
    if error.get("type") == "extra_forbidden":
        msg = "is not an editable field"
    else:
        msg = error.get("msg", "is invalid")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
    return f"{loc}: {msg}" if loc else msg


def parse_payload(schema: Type[SchemaT], data: Any) -> SchemaT:
    """Validate a raw payload, raising the workflow ValidationError on failure."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Payload must be a JSON object")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError("; ".join(_format_error(e) for e in exc.errors())) from exc
