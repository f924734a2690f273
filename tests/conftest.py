"""Shared fixtures: a small two-ingredient catalog and the requirement it is tuned for."""

import os

import pytest

from models import Ingredient, NutritionalRequirement
from formulation_config import get_config

FEED_ENV_VARS = [
    "FEED_CONFIG_PRESET",
    "FEED_CATALOG_PATH",
    "FEED_REQUIREMENTS_PATH",
    "FEED_LOG_DIR",
]


@pytest.fixture(autouse=True)
def isolate_from_env():
    """Keep a developer's FEED_* settings out of the tests."""
    original_values = {}
    for var in FEED_ENV_VARS:
        if var in os.environ:
            original_values[var] = os.environ.pop(var)

    yield

    for var, value in original_values.items():
        os.environ[var] = value


def _ingredient(name, price_per_kg=1000.0, **nutrients):
    values = {"bk": 88.0, "pk": 0.0, "lk": 0.0, "sk": 0.0, "tdn": 0.0, "em": 0.0, "calcium": 0.0}
    values.update(nutrients)
    return Ingredient(name=name, price_per_kg=price_per_kg, **values)


@pytest.fixture
def make_ingredient():
    """Factory: make_ingredient("X", price_per_kg=..., pk=...); unspecified nutrients are 0."""
    return _ingredient


@pytest.fixture
def corn():
    return Ingredient(name="Corn", bk=86, pk=9, lk=4, sk=2, tdn=80, em=3300, calcium=0.02, price_per_kg=4000)


@pytest.fixture
def soybean_meal():
    return Ingredient(name="Soybean Meal", bk=88, pk=44, lk=1, sk=6, tdn=75, em=2200, calcium=0.3, price_per_kg=9000)


@pytest.fixture
def requirement():
    return NutritionalRequirement(pk=18, lk=3, sk=8, tdn=70, em=2800, calcium=0.5)


@pytest.fixture
def config():
    return get_config("standard")
