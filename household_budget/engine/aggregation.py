"""
Aggregation Engine

Pure functions that derive every summary and report figure from one or
more monthly budgets.

GUARANTEES:
- No I/O, no logging, no mutation of inputs
- Decimal arithmetic, no rounding (rounding is a display concern)
- Every ratio guards its denominator: a zero total gives 0, not an error
- An empty budget yields an all-zero summary, never None
"""

from decimal import Decimal
from typing import Iterable, Iterator, Optional, Sequence

from household_budget.categories import CategoryRegistry
from household_budget.engine.contributors import Item, contributor_for
from household_budget.models.budget import ExpenseItem, ExpenseType, MonthlyBudget
from household_budget.models.reports import (
    BudgetSummary,
    CategoryContributorSplit,
    CategoryGroup,
    ContributorTrendPoint,
    EfficiencyIndicator,
    GroupShare,
    GrowthRates,
    MonthlyComparison,
    TrendPoint,
    TypeBreakdown,
    TypeGroup,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

SAVINGS_RATE_BENCHMARK = Decimal("20")
ESSENTIAL_RATE_BENCHMARK = Decimal("70")


def _total(items: Iterable[Item]) -> Decimal:
    return sum((item.amount for item in items), ZERO)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


# =============================================================================
# SUMMARY
# =============================================================================

def calculate_summary(budget: MonthlyBudget) -> BudgetSummary:
    """
    Headline figures of one month.

    available = income - tithe - savings - expenses. A negative value
    is a deficit, not an error.
    """
    total_income = _total(budget.incomes)
    total_expenses = _total(budget.expenses)

    tithe_amount = total_income * budget.tithe_percentage / HUNDRED
    savings_amount = total_income * budget.savings_percentage / HUNDRED

    budget_after_deductions = total_income - tithe_amount - savings_amount
    available_amount = budget_after_deductions - total_expenses

    return BudgetSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        tithe_amount=tithe_amount,
        savings_amount=savings_amount,
        available_amount=available_amount,
        budget_balance=available_amount,
    )


# =============================================================================
# BREAKDOWNS
# =============================================================================

def group_expenses_by_category(expenses: Iterable[ExpenseItem]) -> list[CategoryGroup]:
    """Group by category key, in order of each category's first appearance."""
    by_category: dict[str, list[ExpenseItem]] = {}
    for expense in expenses:
        by_category.setdefault(expense.category, []).append(expense)

    return [
        CategoryGroup(category=category, items=tuple(items), total=_total(items))
        for category, items in by_category.items()
    ]


def group_expenses_by_type(expenses: Iterable[ExpenseItem]) -> TypeBreakdown:
    """
    Partition by the type stored on each expense.

    The registry is deliberately not consulted, so reclassifying a
    subcategory never rewrites past reports.
    """
    buckets: dict[ExpenseType, list[ExpenseItem]] = {t: [] for t in ExpenseType}
    for expense in expenses:
        buckets[expense.type].append(expense)

    def group(expense_type: ExpenseType) -> TypeGroup:
        items = buckets[expense_type]
        return TypeGroup(items=tuple(items), total=_total(items))

    return TypeBreakdown(
        essential=group(ExpenseType.ESSENTIAL),
        non_essential=group(ExpenseType.NON_ESSENTIAL),
        variable=group(ExpenseType.VARIABLE),
    )


def group_by_contributor(items: Iterable[Item], registry: CategoryRegistry) -> dict[str, Decimal]:
    """Total amount per contributor key. Every contributor is present."""
    totals = {key: ZERO for key in registry.contributor_keys}
    for item in items:
        key = contributor_for(item, registry)
        totals[key] = totals.get(key, ZERO) + item.amount
    return totals


def category_shares(expenses: Sequence[ExpenseItem]) -> list[GroupShare]:
    """Each category's total and its percentage of all expenses."""
    overall = _total(expenses)
    return [
        GroupShare(key=group.category, total=group.total, percentage=_percentage(group.total, overall))
        for group in group_expenses_by_category(expenses)
    ]


def type_shares(expenses: Sequence[ExpenseItem]) -> list[GroupShare]:
    """Essential / non-essential / variable totals as percentages of all expenses."""
    breakdown = group_expenses_by_type(expenses)
    overall = breakdown.total
    pairs = (
        (ExpenseType.ESSENTIAL, breakdown.essential),
        (ExpenseType.NON_ESSENTIAL, breakdown.non_essential),
        (ExpenseType.VARIABLE, breakdown.variable),
    )
    return [
        GroupShare(key=expense_type.value, total=group.total, percentage=_percentage(group.total, overall))
        for expense_type, group in pairs
    ]


def expenses_by_category_and_contributor(
    expenses: Iterable[ExpenseItem],
    registry: CategoryRegistry,
) -> list[CategoryContributorSplit]:
    """Per-category contributor split, largest category first."""
    splits: dict[str, dict[str, Decimal]] = {}
    for expense in expenses:
        row = splits.setdefault(
            expense.category, {key: ZERO for key in registry.contributor_keys}
        )
        key = contributor_for(expense, registry)
        row[key] = row.get(key, ZERO) + expense.amount

    result = [
        CategoryContributorSplit(
            category=category,
            by_contributor=row,
            total=sum(row.values(), ZERO),
        )
        for category, row in splits.items()
    ]
    result.sort(key=lambda split: split.total, reverse=True)
    return result


# =============================================================================
# MULTI-MONTH
# =============================================================================

def trend_point(budget: MonthlyBudget) -> TrendPoint:
    summary = calculate_summary(budget)
    return TrendPoint(
        period_key=budget.period_key,
        year=budget.year,
        month=budget.month,
        **summary.model_dump(),
    )


class MonthlyTrend:
    """
    Chronological summaries of a set of budgets.

    Lazy: nothing is computed until iterated. Restartable: every
    iteration starts over from the captured budgets. Budgets sharing a
    period keep their input order.
    """

    def __init__(self, budgets: Iterable[MonthlyBudget]):
        self._budgets = tuple(budgets)

    def __iter__(self) -> Iterator[TrendPoint]:
        for budget in sorted(self._budgets, key=lambda b: b.period):
            yield trend_point(budget)

    def __len__(self) -> int:
        return len(self._budgets)

    def __repr__(self) -> str:
        return f"MonthlyTrend({len(self._budgets)} budgets)"


def monthly_trend(budgets: Iterable[MonthlyBudget]) -> MonthlyTrend:
    return MonthlyTrend(budgets)


def _growth(current: Decimal, previous: Decimal) -> Decimal:
    if previous == 0:
        return ZERO
    return (current - previous) / previous * HUNDRED


def compare_months(current: MonthlyBudget, previous: MonthlyBudget) -> MonthlyComparison:
    """Summaries of two months and the percentage growth between them."""
    current_summary = calculate_summary(current)
    previous_summary = calculate_summary(previous)
    return MonthlyComparison(
        current_month=current_summary,
        previous_month=previous_summary,
        growth=GrowthRates(
            income=_growth(current_summary.total_income, previous_summary.total_income),
            expenses=_growth(current_summary.total_expenses, previous_summary.total_expenses),
            savings=_growth(current_summary.savings_amount, previous_summary.savings_amount),
        ),
    )


def contributor_trend(
    budgets: Iterable[MonthlyBudget],
    registry: CategoryRegistry,
    last: Optional[int] = 6,
) -> list[ContributorTrendPoint]:
    """
    Per-contributor income and expense totals for the most recent periods.

    last=None keeps every period.
    """
    ordered = sorted(budgets, key=lambda b: b.period)
    if last is not None:
        ordered = ordered[-last:] if last > 0 else []

    return [
        ContributorTrendPoint(
            period_key=budget.period_key,
            incomes=group_by_contributor(budget.incomes, registry),
            expenses=group_by_contributor(budget.expenses, registry),
        )
        for budget in ordered
    ]


def find_budget(budgets: Iterable[MonthlyBudget], month: int, year: int) -> Optional[MonthlyBudget]:
    """The first budget recorded for a period, or None."""
    for budget in budgets:
        if budget.month == month and budget.year == year:
            return budget
    return None


# =============================================================================
# INDICATORS
# =============================================================================

def _status(value: Decimal, good: Decimal, fair: Decimal, higher_is_better: bool) -> str:
    if higher_is_better:
        if value > good:
            return "good"
        return "fair" if value > fair else "poor"
    if value < good:
        return "good"
    return "fair" if value < fair else "poor"


def financial_efficiency(budget: MonthlyBudget) -> list[EfficiencyIndicator]:
    """
    Savings rate and essential-spending rate of one month.

    savings_rate = (income - expenses) / income, floored at 0, target above 20%.
    essential_rate = essential / expenses, target below 70%.
    """
    total_income = _total(budget.incomes)
    total_expenses = _total(budget.expenses)
    essential = group_expenses_by_type(budget.expenses).essential.total

    savings_rate = _percentage(total_income - total_expenses, total_income)
    essential_rate = _percentage(essential, total_expenses)

    return [
        EfficiencyIndicator(
            name="savings_rate",
            value=max(ZERO, savings_rate),
            benchmark=SAVINGS_RATE_BENCHMARK,
            status=_status(savings_rate, SAVINGS_RATE_BENCHMARK, Decimal("10"), higher_is_better=True),
        ),
        EfficiencyIndicator(
            name="essential_rate",
            value=essential_rate,
            benchmark=ESSENTIAL_RATE_BENCHMARK,
            status=_status(essential_rate, ESSENTIAL_RATE_BENCHMARK, Decimal("80"), higher_is_better=False),
        ),
    ]
