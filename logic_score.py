# logic_score.py
"""
Ingredient Scoring and Ranking
Scores each ingredient by how well it covers the requirement per unit
of price, and proposes the share it should take in the mixture.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from models import NUTRIENTS

logger = logging.getLogger(__name__)


@dataclass
class IngredientScore:
    ingredient: object
    score: float
    optimal_percentage: float
    ratios: Dict[str, float] = field(default_factory=dict)
    fiber_penalty: float = 1.0


def nutrient_ratios(ingredient, requirements) -> Dict[str, float]:
    """ingredient.axis / requirement.axis per axis; 0 where the requirement is 0."""
    ratios = {}
    for axis in NUTRIENTS:
        required = requirements.nutrient(axis)
        ratios[axis] = ingredient.nutrient(axis) / required if required > 0 else 0.0
    return ratios


def fiber_penalty(sk_ratio: float, config) -> float:
    for limit, multiplier in config.fiber_penalties:
        if sk_ratio > limit:
            return multiplier
    return 1.0


def effective_price(ingredient, config) -> float:
    # Free ingredients would score infinitely high
    return ingredient.price_per_kg if ingredient.price_per_kg > 0 else config.price_epsilon


def optimal_percentage(ingredient, requirements, penalty: float, config) -> float:
    """
    Share this ingredient should take, driven by protein.

    (requirement.pk / ingredient.pk) * K, reduced for fibre excess and
    for price above the reference, then clamped to the configured range.
    """
    if ingredient.pk <= 0 or requirements.pk <= 0:
        return config.min_optimal_percentage

    pct = (requirements.pk / ingredient.pk) * config.protein_factor
    pct *= penalty
    pct *= min(1.0, config.reference_price / effective_price(ingredient, config))

    return min(max(pct, config.min_optimal_percentage), config.max_optimal_percentage)


def score_ingredient(ingredient, requirements, config) -> IngredientScore:
    ratios = nutrient_ratios(ingredient, requirements)

    axes = list(config.score_weights)
    weights = np.array([config.score_weights[a] for a in axes], dtype=float)
    capped = np.minimum(np.array([ratios[a] for a in axes], dtype=float), config.ratio_cap)
    nutrient_score = float(np.dot(weights, capped))

    penalty = fiber_penalty(ratios["sk"], config)
    score = nutrient_score * penalty * config.reference_price / effective_price(ingredient, config)

    return IngredientScore(
        ingredient=ingredient,
        score=score,
        optimal_percentage=optimal_percentage(ingredient, requirements, penalty, config),
        ratios=ratios,
        fiber_penalty=penalty,
    )


def rank_ingredients(ingredients, requirements, config) -> List[IngredientScore]:
    """
    Score every ingredient and sort by score (descending).
    Ties keep input order.
    """
    ranked = [score_ingredient(ing, requirements, config) for ing in ingredients]
    ranked.sort(key=lambda s: s.score, reverse=True)

    for i, s in enumerate(ranked[:5]):
        logger.debug(
            "  %d. %-30s score=%.3f optimal=%.2f%% sk_penalty=%.1f",
            i + 1, s.ingredient.name, s.score, s.optimal_percentage, s.fiber_penalty,
        )

    return ranked
