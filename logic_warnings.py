# logic_warnings.py
"""
Nutrient Threshold Checks
Compares achieved nutrient levels against the requirement's
[min, max] band and reports what falls outside it.
Warnings are advisory: they never block a result.
"""
from models import NUTRIENTS, NUTRIENT_LABELS


def threshold_band(axis, requirements, config):
    """(low, high) absolute limits for one axis."""
    required = requirements.nutrient(axis)
    return required * config.min_thresholds[axis], required * config.max_thresholds[axis]


def nutrient_warnings(totals, requirements, config):
    """
    Human-readable warning for every axis outside its band.

    Args:
        totals: NutrientTotals achieved by the formula
        requirements: NutritionalRequirement targeted
        config: FormulationConfig (threshold bands)

    Returns:
        List of warning strings, in NUTRIENTS order. Axes with a zero
        requirement have no target and are skipped.
    """
    warnings = []
    for axis in NUTRIENTS:
        if requirements.nutrient(axis) <= 0:
            continue

        value = totals.nutrient(axis)
        low, high = threshold_band(axis, requirements, config)
        label = NUTRIENT_LABELS[axis]

        if value < low:
            warnings.append(f"{label} terlalu rendah: {value:.2f} (minimum: {low:.2f})")
        elif value > high:
            warnings.append(f"{label} terlalu tinggi: {value:.2f} (maksimal: {high:.2f})")

    return warnings


def nutrient_status(totals, requirements, config):
    """
    Per-axis status for live display while editing:
    "low", "ok", "high", or "none" when the requirement is zero.
    """
    status = {}
    for axis in NUTRIENTS:
        if requirements.nutrient(axis) <= 0:
            status[axis] = "none"
            continue
        value = totals.nutrient(axis)
        low, high = threshold_band(axis, requirements, config)
        if value < low:
            status[axis] = "low"
        elif value > high:
            status[axis] = "high"
        else:
            status[axis] = "ok"
    return status
