# logic_catalog.py
"""
Ingredient Catalog Maintenance
Name is the join key everywhere, so a second ingredient with an
existing name is rejected rather than overwriting the first.
"""
import json
import logging
import os

from models import Catalog, Ingredient

logger = logging.getLogger(__name__)


def find_ingredient(catalog, name):
    """Ingredient with this name, or None."""
    for ing in catalog.ingredients:
        if ing.name == name:
            return ing
    return None


def add_ingredient(catalog, ingredient):
    """
    Raises:
        ValueError: Name already in catalog
    """
    if not isinstance(ingredient, Ingredient):
        ingredient = Ingredient(**ingredient)
    if find_ingredient(catalog, ingredient.name) is not None:
        raise ValueError(f"Ingredient {ingredient.name!r} already exists")
    return Catalog(ingredients=catalog.ingredients + [ingredient])


def update_ingredient(catalog, name, ingredient):
    """
    Replace the ingredient called name. Renaming onto another
    existing name is rejected.

    Raises:
        ValueError: Unknown name or rename collision
    """
    if not isinstance(ingredient, Ingredient):
        ingredient = Ingredient(**ingredient)
    if find_ingredient(catalog, name) is None:
        raise ValueError(f"Ingredient {name!r} not found")
    if ingredient.name != name and find_ingredient(catalog, ingredient.name) is not None:
        raise ValueError(f"Ingredient {ingredient.name!r} already exists")
    return Catalog(ingredients=[ingredient if ing.name == name else ing for ing in catalog.ingredients])


def remove_ingredient(catalog, name):
    """
    Raises:
        ValueError: Unknown name
    """
    if find_ingredient(catalog, name) is None:
        raise ValueError(f"Ingredient {name!r} not found")
    return Catalog(ingredients=[ing for ing in catalog.ingredients if ing.name != name])


def select_ingredients(catalog, names=None):
    """
    Ingredients for a formulation run, in catalog order.
    names=None selects the whole catalog.

    Raises:
        ValueError: A name is not in the catalog
    """
    if names is None:
        return list(catalog.ingredients)
    missing = [n for n in names if find_ingredient(catalog, n) is None]
    if missing:
        raise ValueError(f"Unknown ingredients: {missing}")
    wanted = set(names)
    return [ing for ing in catalog.ingredients if ing.name in wanted]


def load_catalog(path):
    """Load {"ingredients": [...]} from JSON; an absent file gives an empty catalog."""
    if not os.path.exists(path):
        logger.warning("Catalog file %s not found, starting with an empty catalog", path)
        return Catalog()
    with open(path, "r", encoding="utf-8") as f:
        catalog = Catalog(**json.load(f))
    logger.info("Loaded %d ingredients from %s", len(catalog.ingredients), path)
    return catalog
