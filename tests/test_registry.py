"""Tests for the category registry."""

import json

import pytest

from household_budget.categories import (
    DEFAULT_TAXONOMY,
    CategoryRegistry,
    default_registry,
    load_registry,
)
from household_budget.models.budget import ExpenseType


@pytest.fixture
def registry() -> CategoryRegistry:
    return default_registry()


class TestLookups:
    """Tests for category and contributor lookups."""

    def test_expense_categories_present(self, registry):
        assert list(registry.expense_categories) == [
            "housing", "transport", "food", "education", "other",
        ]

    def test_lookup_expense_category(self, registry):
        housing = registry.lookup_expense_category("housing")
        assert housing is not None
        assert housing.name == "Housing"
        assert "Rent" in housing.subcategory_names

    def test_lookup_miss_returns_none(self, registry):
        """Test lookups never raise on unknown keys."""
        assert registry.lookup_expense_category("vacations") is None
        assert registry.lookup_income_category("grandma") is None
        assert registry.lookup_contributor("grandma") is None

    def test_income_categories_are_contributors(self, registry):
        assert set(registry.income_categories) == set(registry.contributor_keys)

    def test_find_category_by_display_name(self, registry):
        assert registry.find_expense_category_by_name("Transport") == "transport"
        assert registry.find_expense_category_by_name("Nope") is None

    def test_subcategory_membership(self, registry):
        assert registry.is_valid_income_subcategory("duvan", "Duvan salary")
        assert not registry.is_valid_income_subcategory("duvan", "Katherine salary")
        assert registry.is_valid_expense_subcategory("food", "Restaurants")
        assert not registry.is_valid_expense_subcategory("food", "Rent")


class TestClassification:
    """Tests for subcategory classification."""

    def test_known_subcategories(self, registry):
        assert registry.classify_subcategory("housing", "Rent") == ExpenseType.ESSENTIAL
        assert registry.classify_subcategory("food", "Restaurants") == ExpenseType.NON_ESSENTIAL
        assert registry.classify_subcategory("other", "Entertainment") == ExpenseType.VARIABLE

    @pytest.mark.parametrize("name", ["Yacht", "", "rent", "Rent "])
    def test_unknown_subcategory_is_variable(self, registry, name):
        """Test any name absent from the category's list falls back to variable."""
        assert registry.classify_subcategory("housing", name) == ExpenseType.VARIABLE

    def test_unknown_category_is_variable(self, registry):
        assert registry.classify_subcategory("vacations", "Rent") == ExpenseType.VARIABLE


class TestRegistryValue:
    """Tests for immutability and derived registries."""

    def test_default_registry_is_cached(self):
        assert default_registry() is default_registry()

    def test_registry_is_frozen(self, registry):
        with pytest.raises(ValueError):
            registry.shared_contributor = "duvan"

    def test_without_subcategory_returns_new_registry(self, registry):
        trimmed = registry.without_subcategory("housing", "Rent")

        assert trimmed is not registry
        assert trimmed.classify_subcategory("housing", "Rent") == ExpenseType.VARIABLE
        assert registry.classify_subcategory("housing", "Rent") == ExpenseType.ESSENTIAL

    def test_without_subcategory_unknown_category(self, registry):
        assert registry.without_subcategory("vacations", "Rent") is registry

    def test_shared_contributor_must_exist(self):
        taxonomy = dict(DEFAULT_TAXONOMY, shared_contributor="family")
        with pytest.raises(ValueError):
            CategoryRegistry.model_validate(taxonomy)

    def test_duplicate_contributor_keys_rejected(self):
        contributors = DEFAULT_TAXONOMY["contributors"] + [
            {"key": "duvan", "name": "Duvan again"},
        ]
        with pytest.raises(ValueError):
            CategoryRegistry.model_validate(dict(DEFAULT_TAXONOMY, contributors=contributors))

    def test_load_registry_from_file(self, tmp_path):
        """Test a custom taxonomy file is loaded."""
        taxonomy = json.loads(json.dumps(DEFAULT_TAXONOMY))
        taxonomy["expense_categories"]["pets"] = {
            "name": "Pets",
            "subcategories": [{"name": "Vet", "type": "essential"}],
        }
        path = tmp_path / "taxonomy.json"
        path.write_text(json.dumps(taxonomy), encoding="utf-8")

        registry = load_registry(str(path))

        assert registry.classify_subcategory("pets", "Vet") == ExpenseType.ESSENTIAL


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
