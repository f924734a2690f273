"""Tests for ingredient scoring and ranking."""

import math

import pytest

from logic_score import (
    effective_price, fiber_penalty, nutrient_ratios, optimal_percentage,
    rank_ingredients, score_ingredient,
)
from models import NutritionalRequirement


class TestNutrientRatios:
    def test_zero_requirement_gives_zero_ratio(self, make_ingredient):
        ing = make_ingredient("Meal", pk=20, calcium=3)
        ratios = nutrient_ratios(ing, NutritionalRequirement(pk=10))
        assert ratios["pk"] == 2.0
        assert ratios["calcium"] == 0.0

    def test_all_zero_requirement_scores_finite(self, make_ingredient, config):
        ing = make_ingredient("Meal", pk=20, tdn=60)
        scored = score_ingredient(ing, NutritionalRequirement(), config)
        assert scored.score == 0.0
        assert scored.optimal_percentage == config.min_optimal_percentage


class TestFiberPenalty:
    @pytest.mark.parametrize("sk_ratio,expected", [(1.5, 0.6), (1.15, 0.8), (1.1, 1.0), (0.5, 1.0)])
    def test_bands(self, sk_ratio, expected, config):
        assert fiber_penalty(sk_ratio, config) == expected


class TestPrice:
    def test_free_ingredient_uses_epsilon(self, make_ingredient, config):
        ing = make_ingredient("Grass", price_per_kg=0, pk=9)
        assert effective_price(ing, config) == config.price_epsilon

    def test_free_ingredient_scores_finite(self, make_ingredient, requirement, config):
        ing = make_ingredient("Grass", price_per_kg=0, pk=9, tdn=55)
        scored = score_ingredient(ing, requirement, config)
        assert math.isfinite(scored.score)
        assert scored.score > 0


class TestOptimalPercentage:
    def test_protein_driven_share(self, make_ingredient, config):
        ing = make_ingredient("Meal", price_per_kg=5000, pk=36)
        req = NutritionalRequirement(pk=18)
        assert optimal_percentage(ing, req, 1.0, config) == pytest.approx(30.0)

    def test_expensive_ingredient_gets_less(self, make_ingredient, config):
        ing = make_ingredient("Meal", price_per_kg=20000, pk=36)
        req = NutritionalRequirement(pk=18)
        assert optimal_percentage(ing, req, 1.0, config) == pytest.approx(15.0)

    def test_fiber_penalty_reduces_share(self, make_ingredient, config):
        ing = make_ingredient("Meal", price_per_kg=5000, pk=36)
        req = NutritionalRequirement(pk=18)
        assert optimal_percentage(ing, req, 0.6, config) == pytest.approx(18.0)

    def test_zero_protein_falls_back_to_minimum(self, make_ingredient, requirement, config):
        limestone = make_ingredient("Limestone", calcium=38)
        assert optimal_percentage(limestone, requirement, 1.0, config) == config.min_optimal_percentage

    @pytest.mark.parametrize("pk,expected", [(1, 45.0), (500, 5.0)])
    def test_clamped_to_range(self, make_ingredient, config, pk, expected):
        ing = make_ingredient("Meal", price_per_kg=5000, pk=pk)
        req = NutritionalRequirement(pk=18)
        assert optimal_percentage(ing, req, 1.0, config) == expected


class TestRanking:
    def test_corn_outranks_soybean_meal(self, corn, soybean_meal, requirement, config):
        ranked = rank_ingredients([soybean_meal, corn], requirement, config)
        assert [s.ingredient.name for s in ranked] == ["Corn", "Soybean Meal"]
        assert ranked[0].score == pytest.approx(205.1, abs=0.1)

    def test_cheaper_twin_ranks_first(self, make_ingredient, requirement, config):
        dear = make_ingredient("Dear", price_per_kg=8000, pk=20, tdn=70)
        cheap = make_ingredient("Cheap", price_per_kg=4000, pk=20, tdn=70)
        ranked = rank_ingredients([dear, cheap], requirement, config)
        assert ranked[0].ingredient.name == "Cheap"

    def test_ties_keep_input_order(self, make_ingredient, requirement, config):
        a = make_ingredient("A", pk=10)
        b = make_ingredient("B", pk=10)
        ranked = rank_ingredients([a, b], requirement, config)
        assert [s.ingredient.name for s in ranked] == ["A", "B"]
