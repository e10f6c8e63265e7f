"""
Report Models

Derived values produced by the aggregation engine. None of these are
persisted; they are recomputed from the records on every request.
Serialize with model_dump(by_alias=True) for the camelCase shape the
presentation layer reads.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from household_budget.models.budget import ExpenseItem, Money


class ReportModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class BudgetSummary(ReportModel):
    """
    Headline figures of one monthly budget.

    `budget_balance` always equals `available_amount`; both names are
    read by consumers.
    """

    total_income: Money = Decimal("0")
    total_expenses: Money = Decimal("0")
    tithe_amount: Money = Decimal("0")
    savings_amount: Money = Decimal("0")
    available_amount: Money = Decimal("0")
    budget_balance: Money = Decimal("0")

    @property
    def budget_after_deductions(self) -> Decimal:
        """Income left once tithe and savings are set aside."""
        return self.total_income - self.tithe_amount - self.savings_amount


class CategoryGroup(ReportModel):
    """Expenses of one category."""

    category: str
    items: tuple[ExpenseItem, ...] = ()
    total: Money = Decimal("0")


class TypeGroup(ReportModel):
    items: tuple[ExpenseItem, ...] = ()
    total: Money = Decimal("0")


class TypeBreakdown(ReportModel):
    """Expenses partitioned by their frozen classification."""

    essential: TypeGroup = Field(default_factory=TypeGroup)
    non_essential: TypeGroup = Field(default_factory=TypeGroup)
    variable: TypeGroup = Field(default_factory=TypeGroup)

    @property
    def total(self) -> Decimal:
        return self.essential.total + self.non_essential.total + self.variable.total


class TrendPoint(BudgetSummary):
    """A BudgetSummary tagged with its YYYY-MM period."""

    period_key: str
    year: int
    month: int


class GroupShare(ReportModel):
    """A group total and its percentage of the overall total."""

    key: str
    total: Money
    percentage: Money


class GrowthRates(ReportModel):
    """Percentage change from the previous month."""

    income: Money = Decimal("0")
    expenses: Money = Decimal("0")
    savings: Money = Decimal("0")


class MonthlyComparison(ReportModel):
    current_month: BudgetSummary
    previous_month: BudgetSummary
    growth: GrowthRates


class CategoryContributorSplit(ReportModel):
    """Expenses of one category split by contributor."""

    category: str
    by_contributor: dict[str, Money]
    total: Money


class ContributorTrendPoint(ReportModel):
    """Per-contributor income and expense totals for one period."""

    period_key: str
    incomes: dict[str, Money]
    expenses: dict[str, Money]


class EfficiencyIndicator(ReportModel):
    """
    A ratio compared against a rule-of-thumb benchmark.

    status is 'good', 'fair' or 'poor'.
    """

    name: str
    value: Money
    benchmark: Money
    status: str
