"""Category registry package."""

from household_budget.categories.registry import (
    DEFAULT_TAXONOMY,
    CategoryRegistry,
    Contributor,
    ExpenseCategoryConfig,
    IncomeCategoryConfig,
    SubcategoryConfig,
    default_registry,
    load_registry,
)

__all__ = [
    "DEFAULT_TAXONOMY",
    "CategoryRegistry",
    "Contributor",
    "ExpenseCategoryConfig",
    "IncomeCategoryConfig",
    "SubcategoryConfig",
    "default_registry",
    "load_registry",
]
