"""
Tests for Household Budget

Test strategy:
1. Unit tests for individual components (models, registry, validator)
2. Engine tests for every report figure
3. Storage and session flows with in-memory / temporary-directory stores
4. No real API calls in tests
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from household_budget.models.budget import (
    ExpenseDraft,
    ExpenseItem,
    ExpenseType,
    IncomeDraft,
    IncomeItem,
    MonthlyBudget,
    ValidationIssue,
    ValidationResult,
)
from household_budget.models.reports import BudgetSummary, TypeBreakdown


def make_budget(**overrides) -> MonthlyBudget:
    fields = dict(
        id="budget_1",
        month=3,
        year=2024,
        created_at=datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc),
        updated_at=datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return MonthlyBudget(**fields)


class TestRecordModels:
    """Tests for the persisted record models."""

    def test_budget_defaults(self):
        """New budgets default to 10% tithe and 10% savings with no items."""
        budget = make_budget()
        assert budget.tithe_percentage == Decimal("10")
        assert budget.savings_percentage == Decimal("10")
        assert budget.incomes == ()
        assert budget.expenses == ()

    def test_period_key_is_zero_padded(self):
        assert make_budget(month=3, year=2024).period_key == "2024-03"

    def test_month_must_be_valid(self):
        """Test month outside 1-12 is rejected."""
        with pytest.raises(ValueError):
            make_budget(month=13)

    def test_percentage_bounds(self):
        with pytest.raises(ValueError):
            make_budget(tithe_percentage=Decimal("150"))

    def test_negative_amount_rejected(self):
        """Test that negative item amounts are rejected."""
        with pytest.raises(ValueError):
            IncomeItem(
                id="item_1",
                amount=Decimal("-1"),
                category="duvan",
                subcategory="Duvan salary",
                date=datetime(2024, 3, 5),
            )

    def test_budget_is_immutable(self):
        budget = make_budget()
        with pytest.raises(ValueError):
            budget.month = 4

    def test_reads_camel_case_document(self):
        """Test a document saved by an earlier version loads unchanged."""
        doc = {
            "id": "budget_1709280000000_abc123def",
            "month": 3,
            "year": 2024,
            "incomes": [{
                "id": "item_1",
                "description": "Salary",
                "amount": 1000000,
                "category": "duvan",
                "subcategory": "Duvan salary",
                "date": "2024-03-05T00:00:00.000Z",
            }],
            "expenses": [{
                "id": "item_2",
                "description": "Rent",
                "amount": 200000.5,
                "category": "housing",
                "subcategory": "Rent",
                "type": "essential",
                "date": "2024-03-06T00:00:00.000Z",
            }],
            "tithePercentage": 10,
            "savingsPercentage": 15,
            "createdAt": "2024-03-01T08:30:00.000Z",
            "updatedAt": "2024-03-02T09:00:00.000Z",
        }
        budget = MonthlyBudget.model_validate(doc)
        assert budget.savings_percentage == Decimal("15")
        assert budget.incomes[0].amount == Decimal("1000000")
        assert budget.expenses[0].amount == Decimal("200000.5")
        assert budget.expenses[0].type == ExpenseType.ESSENTIAL
        assert budget.incomes[0].contributor is None

    def test_document_round_trip_keeps_unknown_fields(self):
        """Test extra fields pass through a load/save cycle untouched."""
        doc = make_budget().to_document()
        doc["notes"] = "keep me"
        doc["incomes"] = [{
            "id": "item_1",
            "description": "Gift",
            "amount": 50,
            "category": "shared",
            "subcategory": "Family gifts or support",
            "date": "2024-03-05T10:15:00+05:00",
            "source": "legacy-import",
        }]

        reloaded = MonthlyBudget.model_validate(json.loads(json.dumps(doc)))
        again = reloaded.to_document()

        assert again["notes"] == "keep me"
        assert again["incomes"][0]["source"] == "legacy-import"
        assert again == MonthlyBudget.model_validate(again).to_document()

    def test_timestamps_round_trip_without_shift(self):
        """Test timestamps keep their offset across serialization."""
        budget = make_budget(
            created_at=datetime.fromisoformat("2024-03-01T23:30:00-05:00"),
        )
        reloaded = MonthlyBudget.model_validate(budget.to_document())
        assert reloaded.created_at == budget.created_at
        assert reloaded.created_at.utcoffset() == budget.created_at.utcoffset()

    def test_document_uses_camel_case_and_numbers(self):
        doc = make_budget().to_document()
        assert "tithePercentage" in doc
        assert "createdAt" in doc
        assert doc["tithePercentage"] == 10
        assert isinstance(doc["tithePercentage"], int)

    def test_contributor_omitted_when_absent(self):
        """Legacy-shaped items are written back without a contributor key."""
        item = ExpenseItem(
            id="item_1",
            amount=Decimal("10"),
            category="food",
            subcategory="Snacks",
            date=datetime(2024, 3, 5),
        )
        assert "contributor" not in item.to_document()

    def test_contributor_written_when_set(self):
        item = ExpenseItem(
            id="item_1",
            amount=Decimal("10"),
            category="food",
            subcategory="Snacks",
            date=datetime(2024, 3, 5),
            contributor="katherine",
        )
        assert item.to_document()["contributor"] == "katherine"

    def test_null_unknown_fields_survive(self):
        """Unknown fields holding null are written back, not dropped."""
        doc = make_budget().to_document()
        doc["legacyNote"] = None
        doc["expenses"] = [{
            "id": "item_1",
            "description": "Rent",
            "amount": 850000,
            "category": "housing",
            "subcategory": "Rent",
            "type": "essential",
            "date": "2024-03-05T00:00:00",
            "legacyNote": None,
        }]

        again = MonthlyBudget.model_validate(doc).to_document()

        assert "legacyNote" in again and again["legacyNote"] is None
        assert "legacyNote" in again["expenses"][0]
        assert again["expenses"][0]["legacyNote"] is None
        assert "contributor" not in again["expenses"][0]

    def test_stored_strings_keep_whitespace(self):
        doc = make_budget().to_document()
        doc["expenses"] = [{
            "id": "item_1",
            "description": "  Rent  ",
            "amount": 850000,
            "category": "housing",
            "subcategory": "Rent ",
            "date": "2024-03-05T00:00:00",
            "memo": " paid in cash ",
        }]

        again = MonthlyBudget.model_validate(doc).to_document()

        assert again["expenses"][0]["description"] == "  Rent  "
        assert again["expenses"][0]["subcategory"] == "Rent "
        assert again["expenses"][0]["memo"] == " paid in cash "


class TestAmountSerialization:
    """Stored amounts are written without losing precision."""

    def make_item(self, amount: str) -> ExpenseItem:
        return ExpenseItem(
            id="item_1",
            amount=Decimal(amount),
            category="food",
            subcategory="Snacks",
            date=datetime(2024, 3, 5),
        )

    @pytest.mark.parametrize("amount,expected", [
        ("850000", 850000),
        ("12.5", 12.5),
        ("850000.50", 850000.5),
    ])
    def test_exact_amounts_stay_numbers(self, amount, expected):
        written = self.make_item(amount).to_document()["amount"]
        assert written == expected
        assert type(written) is type(expected)

    @pytest.mark.parametrize("amount", [
        "12345678901234567.25",
        "0.1000000000000000055",
        "1E+999999999",
    ])
    def test_inexact_amounts_written_as_strings(self, amount):
        doc = self.make_item(amount).to_document()
        assert doc["amount"] == str(Decimal(amount))

        reloaded = ExpenseItem.model_validate(json.loads(json.dumps(doc)))
        assert reloaded.amount == Decimal(amount)


class TestDrafts:
    """Tests for raw user input models."""

    def test_draft_strips_whitespace(self):
        draft = IncomeDraft(category="  duvan ", subcategory=" Duvan salary ")
        assert draft.category == "duvan"
        assert draft.subcategory == "Duvan salary"

    def test_draft_accepts_numeric_amount(self):
        assert IncomeDraft(amount=1500).amount == "1500"
        assert ExpenseDraft(amount=Decimal("12.50")).amount == "12.50"

    def test_draft_amount_none_becomes_empty(self):
        assert IncomeDraft(amount=None).amount == ""


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        result = ValidationResult(issues=[
            ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ),
        ])
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.is_valid is False

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message="Amount seems unusually high",
                severity="warning",
            ),
        ])
        assert result.has_errors is False
        assert result.warnings == ["Amount seems unusually high"]


class TestReportModels:

    def test_summary_defaults_to_zero(self):
        summary = BudgetSummary()
        assert summary.total_income == 0
        assert summary.budget_balance == 0

    def test_summary_serializes_camel_case(self):
        dumped = BudgetSummary(total_income=Decimal("100")).model_dump(mode="json", by_alias=True)
        assert dumped["totalIncome"] == 100
        assert "budgetBalance" in dumped

    def test_type_breakdown_alias(self):
        dumped = TypeBreakdown().model_dump(by_alias=True)
        assert set(dumped) == {"essential", "nonEssential", "variable"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
