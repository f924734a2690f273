# logic_allocate.py
"""
Feed Formulation Allocation
Greedy heuristic that turns an ingredient catalog + nutrient requirement
into a full percentage allocation (sum = 100%).

Phases:
  A. score and rank ingredients (logic_score)
  B. greedy allocation under per-line caps and nutrient ceilings
  C. distribute whatever is left to the lines that fix the worst deficit
  D. aggregate nutrients and derive threshold warnings

This is not an optimizer: there is no guarantee of the cheapest mix.
"""
import logging

from models import NUTRIENTS, Ingredient, NutritionalRequirement, FormulaLine, FormulationResult, NutrientTotals
from formulation_config import get_config
from logic_score import rank_ingredients
from logic_aggregate import aggregate, percentages_from_formula
from logic_warnings import nutrient_warnings

logger = logging.getLogger(__name__)


def _as_ingredients(ingredients):
    items = [ing if isinstance(ing, Ingredient) else Ingredient(**ing) for ing in ingredients]
    seen = set()
    for ing in items:
        if ing.name in seen:
            raise ValueError(f"Duplicate ingredient name: {ing.name!r}")
        seen.add(ing.name)
    return items


def _as_requirements(requirements):
    if isinstance(requirements, NutritionalRequirement):
        return requirements
    return NutritionalRequirement(**requirements)


def would_exceed_ceiling(cumulative, ingredient, percentage, requirements, config):
    """True if adding percentage of ingredient pushes any axis above requirement * max threshold."""
    for axis in NUTRIENTS:
        required = requirements.nutrient(axis)
        if required <= 0:
            continue
        contribution = ingredient.nutrient(axis) * percentage / 100
        if cumulative[axis] + contribution > required * config.max_thresholds[axis]:
            return True
    return False


def most_deficient_axis(cumulative, requirements, config):
    """Axis among config.deficit_axes with the largest positive 1 - level/requirement, or None."""
    worst = None
    worst_deficit = 0.0
    for axis in config.deficit_axes:
        required = requirements.nutrient(axis)
        if required <= 0:
            continue
        deficit = 1 - cumulative[axis] / required
        if deficit > worst_deficit:
            worst, worst_deficit = axis, deficit
    return worst


def greedy_allocate(ranked, requirements, config):
    """
    Phase B: walk the ranked ingredients and commit a share for each.

    Returns:
        (lines, cumulative nutrient totals, remaining percentage)
    """
    lines = []
    cumulative = {axis: 0.0 for axis in NUTRIENTS}
    remaining = 100.0

    for scored in ranked:
        if remaining < config.stop_percentage:
            break
        if len(lines) >= config.max_ingredients:
            break

        ing = scored.ingredient
        pct = min(scored.optimal_percentage, remaining, config.hard_cap_percentage)

        if would_exceed_ceiling(cumulative, ing, pct, requirements, config):
            # Back off instead of dropping the ingredient
            pct = min(max(config.min_line_percentage, pct * config.shrink_factor), remaining)
            logger.debug("    ~ %-30s shrunk to %.2f%% (nutrient ceiling)", ing.name, pct)

        pct = round(pct, config.decimals)
        if pct <= 0:
            continue

        lines.append(FormulaLine(ingredient=ing.name, percentage=pct, cost_per_kg=ing.price_per_kg))
        for axis in NUTRIENTS:
            cumulative[axis] += ing.nutrient(axis) * pct / 100
        remaining = round(remaining - pct, config.decimals)

        logger.debug("    + %-30s %6.2f%% (remaining %.2f%%)", ing.name, pct, remaining)

    return lines, cumulative, remaining


def distribute_remainder(lines, ingredients, requirements, leftover, cumulative, config):
    """
    Phase C: hand the unallocated percentage to existing lines.

    The most deficient axis picks the top contributors among the current
    lines (split by their axis ratio). With no deficit, or no line that
    supplies the deficient axis, the leftover is split evenly.

    Args:
        lines: Current FormulaLine list
        ingredients: Ingredient list the lines refer to
        requirements: NutritionalRequirement
        leftover: Percentage to distribute
        cumulative: {axis: achieved level} of the current lines
        config: FormulationConfig

    Returns:
        New list of FormulaLine (input is not modified)
    """
    if leftover <= 0 or not lines:
        return list(lines)

    by_name = {ing.name: ing for ing in ingredients}
    shares = {}

    axis = most_deficient_axis(cumulative, requirements, config)
    if axis is not None:
        required = requirements.nutrient(axis)
        candidates = [
            (by_name[line.ingredient].nutrient(axis) / required, idx)
            for idx, line in enumerate(lines)
            if line.ingredient in by_name
        ]
        candidates.sort(key=lambda c: c[0], reverse=True)
        top = candidates[:config.remainder_contributors]
        total_ratio = sum(ratio for ratio, _ in top)
        if total_ratio > 0:
            shares = {idx: leftover * ratio / total_ratio for ratio, idx in top}
            logger.debug("  Remainder %.2f%% -> %s deficit contributors", leftover, axis.upper())

    if not shares:
        per_line = leftover / len(lines)
        shares = {idx: per_line for idx in range(len(lines))}
        logger.debug("  Remainder %.2f%% split evenly over %d lines", leftover, len(lines))

    return [
        line.model_copy(update={"percentage": round(line.percentage + shares[idx], config.decimals)})
        if idx in shares else line
        for idx, line in enumerate(lines)
    ]


def absorb_rounding(lines, config, target=100.0):
    """Push the rounding residue onto the largest line so the total hits target exactly."""
    if not lines:
        return lines
    diff = round(target - sum(line.percentage for line in lines), config.decimals)
    if diff == 0 or abs(diff) > 0.5:
        return lines

    largest = max(range(len(lines)), key=lambda i: lines[i].percentage)
    adjusted = list(lines)
    adjusted[largest] = lines[largest].model_copy(
        update={"percentage": round(lines[largest].percentage + diff, config.decimals)}
    )
    return adjusted


def build_result(lines, ingredients, requirements, config) -> FormulationResult:
    """Phase D: nutrient totals, warnings and total cost for a set of lines."""
    totals = aggregate(ingredients, percentages_from_formula(lines))
    return FormulationResult(
        results=list(lines),
        total_cost=round(sum(line.total_cost for line in lines), config.decimals),
        nutritional_values=totals,
        warnings=nutrient_warnings(totals, requirements, config),
    )


def allocate(ingredients, requirements, config=None) -> FormulationResult:
    """
    Produce a percentage allocation that approximates requirements cheaply.

    Args:
        ingredients: List of Ingredient (or dicts with Ingredient fields)
        requirements: NutritionalRequirement (or dict)
        config: FormulationConfig (None = env preset)

    Returns:
        FormulationResult. An empty catalog gives an empty result.

    Raises:
        ValueError: Duplicate ingredient names or invalid records
    """
    config = config or get_config()
    ingredients = _as_ingredients(ingredients)
    requirements = _as_requirements(requirements)

    if not ingredients:
        logger.info("No ingredients supplied, returning empty formulation")
        return FormulationResult(nutritional_values=NutrientTotals())

    # A) score + rank
    ranked = rank_ingredients(ingredients, requirements, config)

    # B) greedy allocation
    lines, cumulative, remaining = greedy_allocate(ranked, requirements, config)

    # C) leftover
    if remaining > 0 and lines:
        lines = distribute_remainder(lines, ingredients, requirements, remaining, cumulative, config)
        lines = absorb_rounding(lines, config)

    # D) totals + warnings
    result = build_result(lines, ingredients, requirements, config)

    logger.info(
        "Formulated %d/%d ingredients: total %.2f%%, cost %.2f/kg, %d warning(s)",
        len(result.results), len(ingredients),
        sum(line.percentage for line in result.results),
        result.total_cost, len(result.warnings),
    )
    return result
