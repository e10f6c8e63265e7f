"""
Category Registry

Static taxonomy of expense categories (with subcategories classified
essential / non-essential / variable), income categories (one per
contributor) and the contributors themselves.

DESIGN DECISION: The registry is an immutable value built once at startup
and passed read-only to whoever needs it. Nothing mutates it at runtime;
a changed taxonomy is a new registry value.

Lookups never raise. Callers routinely query with free text typed by the
user, so a miss is an ordinary None result, and an unknown expense
subcategory classifies as VARIABLE.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from household_budget.models.budget import ExpenseType


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class SubcategoryConfig(_Frozen):
    name: str = Field(..., min_length=1)
    type: ExpenseType


class ExpenseCategoryConfig(_Frozen):
    """Display metadata and valid subcategories of one expense category."""

    name: str
    icon: str = ""
    color: str = ""
    subcategories: tuple[SubcategoryConfig, ...] = ()

    @property
    def subcategory_names(self) -> tuple[str, ...]:
        return tuple(sub.name for sub in self.subcategories)


class IncomeCategoryConfig(_Frozen):
    """Income categories carry no essential/non-essential classification."""

    name: str
    icon: str = ""
    color: str = ""
    subcategories: tuple[str, ...] = ()


class Contributor(_Frozen):
    """
    A person (or the shared bucket) that items are attributed to.

    aliases are lower-case name fragments searched for in free text by
    the legacy attribution heuristic.
    """

    key: str = Field(..., min_length=1)
    name: str
    color: str = ""
    aliases: tuple[str, ...] = ()


class CategoryRegistry(_Frozen):
    """The complete, read-only category taxonomy."""

    expense_categories: dict[str, ExpenseCategoryConfig]
    income_categories: dict[str, IncomeCategoryConfig]
    contributors: tuple[Contributor, ...]
    shared_contributor: str = "shared"

    @model_validator(mode='after')
    def validate_contributors(self) -> 'CategoryRegistry':
        keys = [c.key for c in self.contributors]
        if len(keys) != len(set(keys)):
            raise ValueError("Contributor keys must be unique")
        if self.shared_contributor not in keys:
            raise ValueError(
                f"Shared contributor '{self.shared_contributor}' is not a contributor"
            )
        return self

    # -- lookups -------------------------------------------------------------

    def lookup_expense_category(self, key: str) -> Optional[ExpenseCategoryConfig]:
        return self.expense_categories.get(key)

    def lookup_income_category(self, key: str) -> Optional[IncomeCategoryConfig]:
        return self.income_categories.get(key)

    def lookup_contributor(self, key: str) -> Optional[Contributor]:
        for contributor in self.contributors:
            if contributor.key == key:
                return contributor
        return None

    @property
    def contributor_keys(self) -> tuple[str, ...]:
        return tuple(c.key for c in self.contributors)

    def find_expense_category_by_name(self, display_name: str) -> Optional[str]:
        """Map a display name (e.g. 'Housing') back to its category key."""
        for key, config in self.expense_categories.items():
            if config.name == display_name:
                return key
        return None

    def classify_subcategory(self, category_key: str, subcategory_name: str) -> ExpenseType:
        """
        Classification of an expense subcategory.

        Exact name match only. Unknown categories and subcategories fall
        back to VARIABLE.
        """
        config = self.expense_categories.get(category_key)
        if config is None:
            return ExpenseType.VARIABLE
        for sub in config.subcategories:
            if sub.name == subcategory_name:
                return sub.type
        return ExpenseType.VARIABLE

    def is_valid_expense_subcategory(self, category_key: str, subcategory_name: str) -> bool:
        config = self.expense_categories.get(category_key)
        return config is not None and subcategory_name in config.subcategory_names

    def is_valid_income_subcategory(self, category_key: str, subcategory_name: str) -> bool:
        config = self.income_categories.get(category_key)
        return config is not None and subcategory_name in config.subcategories

    # -- derivation ----------------------------------------------------------

    def without_subcategory(self, category_key: str, subcategory_name: str) -> 'CategoryRegistry':
        """Return a new registry lacking one expense subcategory."""
        config = self.expense_categories.get(category_key)
        if config is None:
            return self
        trimmed = config.model_copy(update={
            "subcategories": tuple(
                sub for sub in config.subcategories if sub.name != subcategory_name
            ),
        })
        return self.model_copy(update={
            "expense_categories": {**self.expense_categories, category_key: trimmed},
        })


# =============================================================================
# DEFAULT TAXONOMY
# =============================================================================

_E = ExpenseType.ESSENTIAL.value
_N = ExpenseType.NON_ESSENTIAL.value
_V = ExpenseType.VARIABLE.value

DEFAULT_TAXONOMY: dict = {
    "expense_categories": {
        "housing": {
            "name": "Housing",
            "icon": "🏠",
            "color": "#3B82F6",
            "subcategories": [
                {"name": "Rent", "type": _E},
                {"name": "Mobile plan Moreno", "type": _N},
                {"name": "Mobile plan Morena", "type": _N},
                {"name": "Home internet", "type": _E},
                {"name": "Phone installment week 1", "type": _E},
                {"name": "Phone installment week 2", "type": _E},
                {"name": "Phone installment week 3", "type": _E},
                {"name": "Phone installment week 4", "type": _E},
                {"name": "Electricity", "type": _E},
                {"name": "Gas", "type": _E},
                {"name": "Water", "type": _N},
                {"name": "TV, cable, streaming", "type": _N},
                {"name": "Cleaning", "type": _E},
                {"name": "Maintenance/repairs", "type": _N},
                {"name": "Supplies", "type": _N},
            ],
        },
        "transport": {
            "name": "Transport",
            "icon": "🚗",
            "color": "#10B981",
            "subcategories": [
                {"name": "Taxi or bus", "type": _N},
                {"name": "Fuel", "type": _N},
                {"name": "Maintenance", "type": _N},
            ],
        },
        "food": {
            "name": "Food",
            "icon": "🍽️",
            "color": "#F97316",
            "subcategories": [
                {"name": "Groceries / pantry", "type": _E},
                {"name": "Restaurants", "type": _N},
                {"name": "Snacks", "type": _E},
                {"name": "Other food", "type": _V},
            ],
        },
        "education": {
            "name": "Education",
            "icon": "📚",
            "color": "#8B5CF6",
            "subcategories": [
                {"name": "Tuition / fees", "type": _E},
                {"name": "School bus", "type": _E},
                {"name": "School supplies", "type": _E},
                {"name": "Uniforms", "type": _V},
                {"name": "Extraordinary fees", "type": _V},
                {"name": "Other education", "type": _V},
            ],
        },
        "other": {
            "name": "Other expenses",
            "icon": "💼",
            "color": "#EF4444",
            "subcategories": [
                {"name": "Health", "type": _E},
                {"name": "Uninsured medication", "type": _E},
                {"name": "Insurance policies", "type": _E},
                {"name": "Pet expenses", "type": _E},
                {"name": "Personal care", "type": _E},
                {"name": "Taxes", "type": _V},
                {"name": "Loans", "type": _E},
                {"name": "Credit cards", "type": _E},
                {"name": "Entertainment", "type": _V},
                {"name": "Other expenses", "type": _V},
            ],
        },
    },
    "income_categories": {
        "katherine": {
            "name": "Katherine",
            "icon": "👩‍💼",
            "color": "#EC4899",
            "subcategories": [
                "Katherine salary",
                "Katherine fees",
                "Katherine bonuses",
                "Katherine other income",
            ],
        },
        "duvan": {
            "name": "Duvan",
            "icon": "👨‍💼",
            "color": "#3B82F6",
            "subcategories": [
                "Duvan salary",
                "Duvan fees",
                "Duvan bonuses",
                "Duvan other income",
            ],
        },
        "shared": {
            "name": "Shared income",
            "icon": "🏠",
            "color": "#10B981",
            "subcategories": [
                "Joint income",
                "Refunds",
                "Family gifts or support",
                "Other shared income",
            ],
        },
    },
    # Order matters: the legacy heuristic tries contributors in this order.
    "contributors": [
        {"key": "duvan", "name": "Duvan", "color": "#3B82F6", "aliases": ["duvan", "moreno"]},
        {"key": "katherine", "name": "Katherine", "color": "#EC4899", "aliases": ["katherine", "morena"]},
        {"key": "shared", "name": "Shared", "color": "#10B981", "aliases": []},
    ],
    "shared_contributor": "shared",
}


@lru_cache()
def default_registry() -> CategoryRegistry:
    """The built-in taxonomy (cached, built once)."""
    return CategoryRegistry.model_validate(DEFAULT_TAXONOMY)


def load_registry(path: str) -> CategoryRegistry:
    """Load a custom taxonomy from a JSON file with the DEFAULT_TAXONOMY shape."""
    return CategoryRegistry.model_validate_json(Path(path).read_text(encoding="utf-8"))
