# logic_aggregate.py
"""
Nutrient Aggregation
Turns an ingredient set + percentage allocation into the nutrient
levels the mixture achieves. Called after every formula change.
"""
import math

import numpy as np

from models import NUTRIENTS, NutrientTotals


def coerce_percentage(value) -> float:
    """
    Coerce user-entered percentage to a float.
    None, unparsable text, NaN and infinities all become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        pct = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(pct):
        return 0.0
    return pct


def nutrient_matrix(ingredients) -> np.ndarray:
    """n x 6 matrix of nutrient content, rows in ingredient order, columns in NUTRIENTS order."""
    if not ingredients:
        return np.zeros((0, len(NUTRIENTS)), dtype=float)
    return np.array(
        [[ing.nutrient(axis) for axis in NUTRIENTS] for ing in ingredients],
        dtype=float,
    )


def percentages_from_formula(formula):
    """{ingredient name: percentage} for a list of FormulaLine."""
    return {line.ingredient: line.percentage for line in formula}


def aggregate(ingredients, percentages) -> NutrientTotals:
    """
    Total nutrient levels of a mixture.

    For each axis: sum of ingredient.axis * percentage / 100 over the
    ingredients present in percentages. Ingredients missing from the
    map count as 0%.

    Args:
        ingredients: List of Ingredient
        percentages: {ingredient name: percentage}

    Returns:
        NutrientTotals
    """
    if not ingredients:
        return NutrientTotals()

    weights = np.array(
        [coerce_percentage(percentages.get(ing.name)) for ing in ingredients],
        dtype=float,
    )
    totals = weights @ nutrient_matrix(ingredients) / 100.0
    return NutrientTotals(**{axis: float(totals[i]) for i, axis in enumerate(NUTRIENTS)})
