"""
Draft Validation

Checks the raw user input of an income or expense before it becomes a
stored item.

STRUCTURAL CHECKS (errors, block the operation):
- Category present and known to the registry
- Subcategory present (and, for incomes, one of the category's list)
- Amount parseable as a finite, non-negative decimal below 10**16
- Date parseable when given
- Explicit contributor known to the registry

SANITY CHECKS (warnings, never block):
- Unusually large amounts

IMPORTANT: Validation NEVER silently fixes issues.
A malformed amount is reported, never turned into zero.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from household_budget.categories import CategoryRegistry
from household_budget.config import get_settings
from household_budget.models.budget import (
    ExpenseDraft,
    IncomeDraft,
    ValidationIssue,
    ValidationResult,
)

# Largest accepted order of magnitude (amounts below 10**16)
MAX_AMOUNT_MAGNITUDE = 15


def parse_amount(raw: str) -> tuple[Optional[Decimal], Optional[ValidationIssue]]:
    """
    Parse a user-entered amount.

    Returns (amount, None) on success and (None, issue) otherwise.
    """
    text = (raw or "").strip()
    if not text:
        return None, ValidationIssue(
            field="amount",
            issue_type="missing",
            message="Amount is required",
        )
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_amount",
            message=f"Amount '{text}' is not a valid number",
        )
    if not amount.is_finite():
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_amount",
            message=f"Amount '{text}' is not a finite number",
        )
    if amount.adjusted() > MAX_AMOUNT_MAGNITUDE:
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_amount",
            message=f"Amount '{text}' is too large",
        )
    if amount < 0:
        return None, ValidationIssue(
            field="amount",
            issue_type="negative_amount",
            message="Amount cannot be negative",
        )
    return amount, None


def parse_item_date(raw: str, today: Optional[datetime] = None) -> tuple[Optional[datetime], Optional[ValidationIssue]]:
    """
    Parse a user-entered date.

    Empty input means today (at midnight). ISO dates and datetimes are
    accepted; an offset, if present, is kept as given.
    """
    text = (raw or "").strip()
    if not text:
        now = today or datetime.now()
        return datetime(now.year, now.month, now.day), None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text), None
    except ValueError:
        return None, ValidationIssue(
            field="date",
            issue_type="invalid_date",
            message=f"Date '{raw}' is not a valid ISO date",
        )


class DraftValidator:
    """Validates income and expense drafts against a category registry."""

    def __init__(
        self,
        registry: CategoryRegistry,
        max_item_amount: Optional[Decimal] = None,
    ):
        """
        Initialize validator.

        Args:
            registry: Taxonomy used to check categories and subcategories
            max_item_amount: Warning threshold. Defaults to the
                             BUDGET_MAX_ITEM_AMOUNT setting.
        """
        self._registry = registry
        if max_item_amount is None:
            max_item_amount = Decimal(str(get_settings().budget.max_item_amount))
        self._max_item_amount = max_item_amount

    def _validate_common(self, draft: IncomeDraft, issues: list[ValidationIssue]) -> ValidationResult:
        amount, amount_issue = parse_amount(draft.amount)
        if amount_issue:
            issues.append(amount_issue)
        elif amount > self._max_item_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,}) seems unusually high",
                severity="warning",
            ))

        item_date, date_issue = parse_item_date(draft.date)
        if date_issue:
            issues.append(date_issue)

        return ValidationResult(issues=issues, amount=amount, item_date=item_date)

    def validate_income(self, draft: IncomeDraft) -> ValidationResult:
        issues: list[ValidationIssue] = []

        if not draft.category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Income category is required",
            ))
        elif self._registry.lookup_income_category(draft.category) is None:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Unknown income category: {draft.category}",
            ))

        if not draft.subcategory:
            issues.append(ValidationIssue(
                field="subcategory",
                issue_type="missing",
                message="Income subcategory is required",
            ))
        elif (
            draft.category
            and self._registry.lookup_income_category(draft.category) is not None
            and not self._registry.is_valid_income_subcategory(draft.category, draft.subcategory)
        ):
            issues.append(ValidationIssue(
                field="subcategory",
                issue_type="invalid_subcategory",
                message=(
                    f"'{draft.subcategory}' is not a subcategory of "
                    f"income category '{draft.category}'"
                ),
            ))

        return self._validate_common(draft, issues)

    def validate_expense(self, draft: ExpenseDraft) -> ValidationResult:
        """
        Validate an expense draft.

        The subcategory may be free text: names missing from the registry
        are accepted and later classify as variable.
        """
        issues: list[ValidationIssue] = []

        if not draft.category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Expense category is required",
            ))
        elif self._registry.lookup_expense_category(draft.category) is None:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Unknown expense category: {draft.category}",
            ))

        if not draft.subcategory:
            issues.append(ValidationIssue(
                field="subcategory",
                issue_type="missing",
                message="Expense subcategory is required",
            ))

        if draft.contributor and self._registry.lookup_contributor(draft.contributor) is None:
            issues.append(ValidationIssue(
                field="contributor",
                issue_type="unknown_contributor",
                message=f"Unknown contributor: {draft.contributor}",
            ))

        return self._validate_common(draft, issues)

    def validate_percentages(self, tithe: str, savings: str) -> tuple[list[ValidationIssue], Optional[Decimal], Optional[Decimal]]:
        """Validate tithe and savings percentages (0-100 each)."""
        issues: list[ValidationIssue] = []
        parsed: dict[str, Optional[Decimal]] = {}

        for field, raw in (("tithe_percentage", tithe), ("savings_percentage", savings)):
            value, issue = parse_amount(str(raw))
            if issue:
                issues.append(issue.model_copy(update={"field": field}))
            elif value > 100:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_percentage",
                    message=f"Percentage cannot exceed 100 (got {value})",
                ))
                value = None
            parsed[field] = value

        return issues, parsed["tithe_percentage"], parsed["savings_percentage"]
