# logic_edit.py
"""
Interactive Formula Editing
Line-level edits a user makes after the allocator has run.
Every function returns a new list of FormulaLine; a rejected edit
raises ValueError and leaves the caller's formula untouched.
"""
import logging
import math

from models import FormulaLine, FormulationResult
from formulation_config import get_config
from logic_aggregate import aggregate, percentages_from_formula
from logic_allocate import build_result, distribute_remainder, absorb_rounding

logger = logging.getLogger(__name__)


def _index_of(formula, ingredient_name):
    for idx, line in enumerate(formula):
        if line.ingredient == ingredient_name:
            return idx
    return None


def total_percentage(formula) -> float:
    return sum(line.percentage for line in formula)


def total_cost(formula) -> float:
    return round(sum(line.total_cost for line in formula), 2)


def is_balanced(formula, tolerance: float = 0.01) -> bool:
    """True when the formula totals 100% within tolerance."""
    return abs(total_percentage(formula) - 100.0) <= tolerance


def set_line_percentage(formula, ingredient_name, new_percentage):
    """
    Replace one line's percentage. Other lines are left as they are,
    so the total may drift away from 100%.

    Raises:
        ValueError: Unknown ingredient, negative or non-finite percentage
    """
    idx = _index_of(formula, ingredient_name)
    if idx is None:
        raise ValueError(f"No line for ingredient {ingredient_name!r} in formula")
    if new_percentage is None or not math.isfinite(new_percentage) or new_percentage < 0:
        raise ValueError(f"Invalid percentage for {ingredient_name!r}: {new_percentage}")

    updated = list(formula)
    updated[idx] = formula[idx].model_copy(update={"percentage": float(new_percentage)})
    return updated


def add_line(formula, ingredient, percentage, tolerance: float = 0.01):
    """
    Append a line for ingredient.

    Raises:
        ValueError: Ingredient already in formula, percentage <= 0,
                    or the total would exceed 100%
    """
    if _index_of(formula, ingredient.name) is not None:
        raise ValueError(f"Ingredient {ingredient.name!r} is already in the formula")
    if percentage is None or not math.isfinite(percentage) or percentage <= 0:
        raise ValueError(f"Percentage must be positive, got {percentage}")

    current = total_percentage(formula)
    if current + percentage > 100.0 + tolerance:
        raise ValueError(
            f"Total percentage cannot exceed 100% ({current:.2f}% + {percentage:.2f}%)"
        )

    return list(formula) + [
        FormulaLine(ingredient=ingredient.name, percentage=float(percentage), cost_per_kg=ingredient.price_per_kg)
    ]


def remove_line(formula, ingredient_name):
    """
    Drop a line. Its percentage is NOT handed to the other lines;
    use redistribute_remainder() for that.

    Raises:
        ValueError: Unknown ingredient
    """
    idx = _index_of(formula, ingredient_name)
    if idx is None:
        raise ValueError(f"No line for ingredient {ingredient_name!r} in formula")
    return [line for i, line in enumerate(formula) if i != idx]


def unused_ingredients(formula, ingredients):
    """Catalog entries that have no line in the formula yet."""
    used = {line.ingredient for line in formula}
    return [ing for ing in ingredients if ing.name not in used]


def validate_formula(formula):
    """
    Raises:
        ValueError: An ingredient appears on more than one line, or a
                    line percentage is negative or non-finite
    """
    seen = set()
    for line in formula:
        if line.ingredient in seen:
            raise ValueError(f"Ingredient {line.ingredient!r} appears more than once in the formula")
        seen.add(line.ingredient)
        if not math.isfinite(line.percentage) or line.percentage < 0:
            raise ValueError(f"Invalid percentage for {line.ingredient!r}: {line.percentage}")


def reprice_formula(formula, ingredients):
    """
    Lines with cost_per_kg taken from the catalog.

    Raises:
        ValueError: A line names an ingredient not in ingredients
    """
    by_name = {ing.name: ing for ing in ingredients}
    missing = [line.ingredient for line in formula if line.ingredient not in by_name]
    if missing:
        raise ValueError(f"Unknown ingredients in formula: {missing}")
    return [
        line.model_copy(update={"cost_per_kg": by_name[line.ingredient].price_per_kg})
        for line in formula
    ]


def redistribute_remainder(formula, ingredients, requirements, config=None):
    """
    Hand the gap to 100% to existing lines with the allocator's
    remainder rule (most deficient nutrient first).
    A formula at or above 100% is returned unchanged.

    Raises:
        ValueError: See validate_formula
    """
    validate_formula(formula)
    config = config or get_config()
    leftover = round(100.0 - total_percentage(formula), config.decimals)
    if leftover <= 0 or not formula:
        return list(formula)

    cumulative = aggregate(ingredients, percentages_from_formula(formula)).as_dict()
    lines = distribute_remainder(formula, ingredients, requirements, leftover, cumulative, config)
    return absorb_rounding(lines, config)


def apply_formula(formula, ingredients, requirements, config=None) -> FormulationResult:
    """
    Commit an edited formula.

    Raises:
        ValueError: Invalid lines (see validate_formula), an ingredient
                    missing from the catalog, or a total not within
                    config.balance_tolerance of 100%
    """
    validate_formula(formula)
    config = config or get_config()
    total = total_percentage(formula)
    if not is_balanced(formula, config.balance_tolerance):
        raise ValueError(f"Total percentage must be 100% to apply (currently {total:.2f}%)")

    formula = reprice_formula(formula, ingredients)
    result = build_result(formula, ingredients, requirements, config)
    logger.info("Applied edited formula: %d lines, cost %.2f/kg", len(formula), result.total_cost)
    return result
