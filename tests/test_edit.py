"""Tests for interactive formula editing."""

import pytest

from logic_edit import (
    add_line, apply_formula, is_balanced, redistribute_remainder, remove_line, reprice_formula,
    set_line_percentage, total_cost, total_percentage, unused_ingredients, validate_formula,
)
from models import FormulaLine


@pytest.fixture
def formula():
    return [
        FormulaLine(ingredient="Corn", percentage=60, cost_per_kg=4000),
        FormulaLine(ingredient="Soybean Meal", percentage=40, cost_per_kg=9000),
    ]


class TestTotals:
    def test_total_percentage_and_cost(self, formula):
        assert total_percentage(formula) == 100
        assert total_cost(formula) == pytest.approx(6000.0)

    @pytest.mark.parametrize("corn_pct,balanced", [(60, True), (59.995, True), (59.9, False), (61, False)])
    def test_is_balanced(self, formula, corn_pct, balanced):
        edited = set_line_percentage(formula, "Corn", corn_pct)
        assert is_balanced(edited) is balanced


class TestSetLinePercentage:
    def test_updates_one_line_and_its_cost(self, formula):
        edited = set_line_percentage(formula, "Corn", 50)
        assert edited[0].percentage == 50
        assert edited[0].total_cost == pytest.approx(2000.0)
        assert edited[1] == formula[1]
        assert total_percentage(edited) == 90

    def test_original_is_untouched(self, formula):
        set_line_percentage(formula, "Corn", 10)
        assert formula[0].percentage == 60

    def test_idempotent(self, formula):
        once = set_line_percentage(formula, "Corn", 55)
        twice = set_line_percentage(once, "Corn", 55)
        assert once == twice

    def test_unknown_ingredient(self, formula):
        with pytest.raises(ValueError, match="No line"):
            set_line_percentage(formula, "Fish Meal", 10)

    @pytest.mark.parametrize("value", [-1, float("nan"), float("inf"), None])
    def test_invalid_percentage(self, formula, value):
        with pytest.raises(ValueError):
            set_line_percentage(formula, "Corn", value)


class TestAddLine:
    def test_appends_new_line(self, corn, soybean_meal):
        start = [FormulaLine(ingredient="Corn", percentage=60, cost_per_kg=corn.price_per_kg)]
        edited = add_line(start, soybean_meal, 40)
        assert [line.ingredient for line in edited] == ["Corn", "Soybean Meal"]
        assert edited[1].cost_per_kg == 9000
        assert total_percentage(edited) == 100
        assert len(start) == 1

    def test_duplicate_is_rejected(self, formula, corn):
        with pytest.raises(ValueError, match="already in the formula"):
            add_line(formula, corn, 5)
        assert len(formula) == 2

    @pytest.mark.parametrize("value", [0, -5, float("nan")])
    def test_non_positive_is_rejected(self, make_ingredient, value):
        with pytest.raises(ValueError, match="positive"):
            add_line([], make_ingredient("Bran"), value)

    def test_overflow_is_rejected(self, formula, make_ingredient):
        trimmed = set_line_percentage(formula, "Corn", 50)
        with pytest.raises(ValueError, match="exceed 100%"):
            add_line(trimmed, make_ingredient("Bran"), 10.5)
        assert len(add_line(trimmed, make_ingredient("Bran"), 10)) == 3


class TestRemoveLine:
    def test_removes_without_rebalancing(self, formula):
        edited = remove_line(formula, "Soybean Meal")
        assert [line.ingredient for line in edited] == ["Corn"]
        assert total_percentage(edited) == 60

    def test_unknown_ingredient(self, formula):
        with pytest.raises(ValueError):
            remove_line(formula, "Fish Meal")


class TestUnusedIngredients:
    def test_lists_catalog_entries_without_lines(self, formula, corn, soybean_meal, make_ingredient):
        bran = make_ingredient("Bran")
        assert unused_ingredients(formula, [corn, soybean_meal, bran]) == [bran]


class TestRedistributeRemainder:
    def test_gap_goes_to_the_energy_contributor(self, corn, soybean_meal, requirement, config):
        partial = [
            FormulaLine(ingredient="Corn", percentage=40, cost_per_kg=4000),
            FormulaLine(ingredient="Soybean Meal", percentage=20, cost_per_kg=9000),
        ]
        edited = redistribute_remainder(partial, [corn, soybean_meal], requirement, config)
        shares = {line.ingredient: line.percentage for line in edited}
        assert shares == {"Corn": pytest.approx(80.0), "Soybean Meal": pytest.approx(20.0)}

    def test_full_formula_is_unchanged(self, formula, corn, soybean_meal, requirement, config):
        assert redistribute_remainder(formula, [corn, soybean_meal], requirement, config) == formula


class TestApplyFormula:
    def test_unbalanced_formula_is_refused(self, formula, corn, soybean_meal, requirement, config):
        edited = set_line_percentage(formula, "Corn", 50)
        with pytest.raises(ValueError, match="must be 100%"):
            apply_formula(edited, [corn, soybean_meal], requirement, config)

    def test_balanced_formula_is_evaluated(self, formula, corn, soybean_meal, requirement, config):
        result = apply_formula(formula, [corn, soybean_meal], requirement, config)
        assert result.results == formula
        assert result.total_cost == pytest.approx(6000.0)
        assert result.nutritional_values.pk == pytest.approx(23.0)
        assert any(w.startswith("PK terlalu tinggi") for w in result.warnings)

    def test_repeated_ingredient_is_refused(self, corn, requirement, config):
        doubled = [
            FormulaLine(ingredient="Corn", percentage=50, cost_per_kg=4000),
            FormulaLine(ingredient="Corn", percentage=50, cost_per_kg=4000),
        ]
        with pytest.raises(ValueError, match="more than once"):
            apply_formula(doubled, [corn], requirement, config)

    def test_negative_line_is_refused(self, corn, soybean_meal, requirement, config):
        lopsided = [
            FormulaLine(ingredient="Corn", percentage=150, cost_per_kg=4000),
            FormulaLine(ingredient="Soybean Meal", percentage=-50, cost_per_kg=9000),
        ]
        with pytest.raises(ValueError, match="Invalid percentage"):
            apply_formula(lopsided, [corn, soybean_meal], requirement, config)

    def test_line_outside_catalog_is_refused(self, formula, corn, requirement, config):
        with pytest.raises(ValueError, match="Unknown ingredients"):
            apply_formula(formula, [corn], requirement, config)

    def test_costs_come_from_the_catalog(self, formula, corn, soybean_meal, requirement, config):
        stale = [line.model_copy(update={"cost_per_kg": 1}) for line in formula]
        result = apply_formula(stale, [corn, soybean_meal], requirement, config)
        assert [line.cost_per_kg for line in result.results] == [4000, 9000]
        assert result.total_cost == pytest.approx(6000.0)


class TestValidateFormula:
    def test_valid_formula_passes(self, formula):
        validate_formula(formula)

    def test_repeated_ingredient(self):
        doubled = [
            FormulaLine(ingredient="Corn", percentage=30, cost_per_kg=4000),
            FormulaLine(ingredient="Corn", percentage=30, cost_per_kg=4000),
        ]
        with pytest.raises(ValueError):
            validate_formula(doubled)

    @pytest.mark.parametrize("value", [-0.5, float("nan"), float("inf")])
    def test_bad_percentage(self, value):
        with pytest.raises(ValueError):
            validate_formula([FormulaLine(ingredient="Corn", percentage=value, cost_per_kg=4000)])

    def test_redistribute_refuses_repeated_ingredient(self, corn, requirement, config):
        doubled = [
            FormulaLine(ingredient="Corn", percentage=30, cost_per_kg=4000),
            FormulaLine(ingredient="Corn", percentage=30, cost_per_kg=4000),
        ]
        with pytest.raises(ValueError, match="more than once"):
            redistribute_remainder(doubled, [corn], requirement, config)


class TestRepriceFormula:
    def test_prices_replaced(self, formula, corn, soybean_meal):
        stale = [line.model_copy(update={"cost_per_kg": 1}) for line in formula]
        repriced = reprice_formula(stale, [corn, soybean_meal])
        assert [line.total_cost for line in repriced] == [2400.0, 3600.0]
        assert stale[0].cost_per_kg == 1
