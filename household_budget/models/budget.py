"""
Budget Record Models

These models define the schema of the persisted month records and of
the drafts the presentation layer hands in. They are designed to:
1. Keep the stored field names (camelCase) byte-for-byte compatible
   with records saved by earlier versions
2. Pass unknown fields through untouched
3. Be immutable: every change produces a new value

DESIGN DECISION: Amounts and percentages are Decimal.
No rounding happens at this layer; rounding is a display concern.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)
from pydantic.alias_generators import to_camel


# Amounts up to this order of magnitude are written as JSON numbers when
# that is exact; anything else is written as a decimal string.
_MAX_JSON_MAGNITUDE = 15


def _number_to_json(value: Decimal) -> Union[int, float]:
    """Serialize a report figure as a JSON number, integral values as int."""
    if value.is_finite() and value.adjusted() <= _MAX_JSON_MAGNITUDE and value == value.to_integral_value():
        return int(value)
    return float(value)


def _record_number_to_json(value: Decimal) -> Union[int, float, str]:
    """
    Serialize a stored amount without losing precision.

    A JSON number when the conversion is exact (integral, or a float whose
    repr reads back to the same Decimal), otherwise the decimal string,
    which loads back to the same value.
    """
    if value.is_finite() and value.adjusted() <= _MAX_JSON_MAGNITUDE:
        if value == value.to_integral_value():
            return int(value)
        as_float = float(value)
        if Decimal(repr(as_float)) == value:
            return as_float
    return str(value)


Money = Annotated[
    Decimal,
    PlainSerializer(_number_to_json, return_type=Union[int, float], when_used="json"),
]

Amount = Annotated[
    Decimal,
    Field(ge=0),
    PlainSerializer(_record_number_to_json, return_type=Union[int, float, str], when_used="json"),
]

Percentage = Annotated[
    Decimal,
    Field(ge=0, le=100),
    PlainSerializer(_record_number_to_json, return_type=Union[int, float, str], when_used="json"),
]


# =============================================================================
# ENUMS
# =============================================================================

class ExpenseType(str, Enum):
    """
    Spending classification of an expense subcategory.

    Fixed per subcategory in the category registry and frozen onto
    each expense when it is recorded.
    """
    ESSENTIAL = "essential"
    NON_ESSENTIAL = "non-essential"
    VARIABLE = "variable"


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class RecordModel(BaseModel):
    """
    Base for persisted records.

    Attributes are snake_case in Python and camelCase on the wire.
    Extra fields found in stored documents are kept and written back
    exactly as loaded, null values and surrounding whitespace included.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    # Optional fields left out of the document while unset, so records
    # that never had them are written back in their original shape
    OMIT_WHEN_NONE: ClassVar[tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def omit_unset_optionals(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name in self.OMIT_WHEN_NONE:
            if getattr(self, name) is None:
                data.pop(name, None)
                data.pop(to_camel(name), None)
        return data

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored JSON-compatible shape."""
        return self.model_dump(mode="json", by_alias=True)


class IncomeItem(RecordModel):
    """A single income line item. Category is the contributor key."""

    OMIT_WHEN_NONE: ClassVar[tuple[str, ...]] = ("contributor",)

    id: str = Field(..., min_length=1)
    description: str = ""
    amount: Amount
    category: str
    subcategory: str
    date: datetime
    contributor: Optional[str] = Field(
        default=None,
        description="Explicit contributor key (absent on legacy records)"
    )


class ExpenseItem(RecordModel):
    """
    A single expense line item.

    `type` is resolved from the registry when the item is created and
    never re-derived afterwards.
    """

    OMIT_WHEN_NONE: ClassVar[tuple[str, ...]] = ("contributor",)

    id: str = Field(..., min_length=1)
    description: str = ""
    amount: Amount
    category: str
    subcategory: str
    type: ExpenseType = ExpenseType.VARIABLE
    date: datetime
    contributor: Optional[str] = Field(
        default=None,
        description="Explicit contributor key (absent on legacy records)"
    )


class MonthlyBudget(RecordModel):
    """
    All income and expense items of one calendar month.

    The budget owns its items. At most one budget per (user, month, year)
    is expected; callers check before creating a new one.
    """

    id: str = Field(..., min_length=1)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)
    incomes: tuple[IncomeItem, ...] = ()
    expenses: tuple[ExpenseItem, ...] = ()
    tithe_percentage: Percentage = Decimal("10")
    savings_percentage: Percentage = Decimal("10")
    created_at: datetime
    updated_at: datetime

    @property
    def period_key(self) -> str:
        """Period key in YYYY-MM form."""
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def period(self) -> tuple[int, int]:
        """(year, month) tuple, the chronological sort key."""
        return (self.year, self.month)


# =============================================================================
# DRAFTS (raw user input)
# =============================================================================

class IncomeDraft(BaseModel):
    """
    Income as entered by the user, before validation.

    Amount and date are raw strings; they are parsed by the validator.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = ""
    amount: str = ""
    category: str = ""
    subcategory: str = ""
    date: str = ""

    @field_validator('amount', 'date', mode='before')
    @classmethod
    def stringify(cls, v: Any) -> Any:
        """Accept numbers and dates from programmatic callers."""
        if v is None:
            return ""
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        if hasattr(v, "isoformat"):
            return v.isoformat()
        return v


class ExpenseDraft(IncomeDraft):
    """Expense as entered by the user, with an optional explicit contributor."""

    contributor: str = ""


# =============================================================================
# VALIDATION / MUTATION RESULTS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_amount', 'not_found')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of validating a draft.

    Carries the parsed amount and date when they could be parsed, so the
    record operations never parse user input twice.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)
    amount: Optional[Decimal] = None
    item_date: Optional[datetime] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def warnings(self) -> list[str]:
        """Messages of non-blocking issues."""
        return [i.message for i in self.issues if i.severity == "warning"]


class RecordUpdate(BaseModel):
    """
    Outcome of a record operation.

    When `applied` is False, `budget` is the untouched input and
    `issues` explains why.
    """
    model_config = ConfigDict(frozen=True)

    budget: MonthlyBudget
    applied: bool
    item_id: Optional[str] = None
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def errors(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "error"]
