# formulation_config.py
"""
Formulation Tunables
Every constant the allocator uses lives in one FormulationConfig value
that is passed into allocate(). Earlier revisions of the calculator
disagreed on the threshold bands and scoring constants, so those
revisions are kept as named presets instead of hard-coded numbers.

Preset can be selected via env: FEED_CONFIG_PRESET=standard|strict
"""

import os
from typing import Dict, List, Tuple

from pydantic import BaseModel, model_validator

from models import NUTRIENTS

DEFAULT_PRESET = os.getenv("FEED_CONFIG_PRESET", "standard").lower()


class FormulationConfig(BaseModel):
    # Phase A: scoring
    score_weights: Dict[str, float] = {
        "pk": 35.0,       # protein
        "tdn": 25.0,      # energy
        "em": 20.0,       # energy
        "lk": 10.0,       # fat
        "calcium": 10.0,
    }
    ratio_cap: float = 1.2
    # (sk ratio above, multiplier), checked in order
    fiber_penalties: List[Tuple[float, float]] = [(1.2, 0.6), (1.1, 0.8)]
    protein_factor: float = 60.0
    reference_price: float = 10000.0
    min_optimal_percentage: float = 5.0
    max_optimal_percentage: float = 45.0
    price_epsilon: float = 0.01

    # Phase B: greedy allocation
    hard_cap_percentage: float = 40.0
    shrink_factor: float = 0.8
    min_line_percentage: float = 2.0
    stop_percentage: float = 2.0
    max_ingredients: int = 8

    # Phase C: remainder distribution
    deficit_axes: List[str] = ["pk", "tdn", "em"]
    remainder_contributors: int = 1

    # Phase D: bands as fractions of the requirement
    min_thresholds: Dict[str, float] = {
        "pk": 0.85, "lk": 0.80, "sk": 0.90, "tdn": 0.90, "em": 0.90, "calcium": 0.80,
    }
    max_thresholds: Dict[str, float] = {
        "pk": 1.15, "lk": 1.20, "sk": 1.10, "tdn": 1.10, "em": 1.10, "calcium": 1.20,
    }

    decimals: int = 2
    balance_tolerance: float = 0.01

    @model_validator(mode="after")
    def _check(self):
        for axis in NUTRIENTS:
            if axis not in self.min_thresholds or axis not in self.max_thresholds:
                raise ValueError(f"Threshold band missing for {axis}")
            if self.min_thresholds[axis] > self.max_thresholds[axis]:
                raise ValueError(f"Threshold band for {axis} has min above max")
        unknown = [a for a in list(self.score_weights) + self.deficit_axes if a not in NUTRIENTS]
        if unknown:
            raise ValueError(f"Unknown nutrient axes: {unknown}")
        if not 1 <= self.remainder_contributors <= 2:
            raise ValueError("remainder_contributors must be 1 or 2")
        if self.max_ingredients < 1:
            raise ValueError("max_ingredients must be at least 1")
        if self.min_optimal_percentage <= 0 or self.max_optimal_percentage >= 100:
            raise ValueError("optimal percentage bounds must stay inside (0, 100)")
        if self.min_optimal_percentage > self.max_optimal_percentage:
            raise ValueError("min_optimal_percentage is above max_optimal_percentage")
        if not 0 < self.shrink_factor < 1:
            raise ValueError("shrink_factor must be between 0 and 1")
        if self.price_epsilon <= 0:
            raise ValueError("price_epsilon must be positive")
        return self


PRESETS: Dict[str, dict] = {
    "standard": {},
    # Tighter revision: protein and energy held to +/-3%
    "strict": {
        "min_thresholds": {
            "pk": 0.97, "lk": 0.80, "sk": 0.90, "tdn": 0.97, "em": 0.97, "calcium": 0.80,
        },
        "max_thresholds": {
            "pk": 1.03, "lk": 1.20, "sk": 1.10, "tdn": 1.03, "em": 1.03, "calcium": 1.20,
        },
    },
}


def get_config(preset: str = None, **overrides) -> FormulationConfig:
    """
    Build a fresh FormulationConfig.

    Args:
        preset: Name from PRESETS (None = env default)
        **overrides: Field values replacing the preset's

    Raises:
        ValueError: Unknown preset or invalid field values
    """
    name = (preset or DEFAULT_PRESET).lower()
    if name not in PRESETS:
        raise ValueError(f"Unknown formulation preset: {name!r} (choose from {sorted(PRESETS)})")
    return FormulationConfig(**{**PRESETS[name], **overrides})


def load_config() -> FormulationConfig:
    """Config for the preset named in FEED_CONFIG_PRESET."""
    return get_config(os.getenv("FEED_CONFIG_PRESET", DEFAULT_PRESET))
