# requirements_repository.py
"""
Nutrient Requirement Repository
One NutritionalRequirement per (animal type, age group). The allocator
never reads this store directly: callers take a record with get() and
pass it in, so a formulation run always sees one consistent snapshot.
"""
import json
import logging
import os

from models import NutritionalRequirement

logger = logging.getLogger(__name__)

# pk, lk, sk, tdn, calcium in %; em in kcal/kg
DEFAULT_REQUIREMENTS = {
    "dairy-cattle": {
        "calf":   {"pk": 18, "lk": 3, "sk": 8,  "tdn": 75, "em": 2600, "calcium": 0.7},
        "heifer": {"pk": 14, "lk": 3, "sk": 15, "tdn": 65, "em": 2300, "calcium": 0.6},
        "adult":  {"pk": 16, "lk": 4, "sk": 17, "tdn": 70, "em": 2500, "calcium": 0.5},
    },
    "beef-cattle": {
        "calf":     {"pk": 17, "lk": 3, "sk": 10, "tdn": 70, "em": 2500, "calcium": 0.6},
        "yearling": {"pk": 13, "lk": 3, "sk": 15, "tdn": 65, "em": 2300, "calcium": 0.5},
        "adult":    {"pk": 12, "lk": 3, "sk": 18, "tdn": 60, "em": 2200, "calcium": 0.4},
    },
    "broiler-chicken": {
        "starter":  {"pk": 23, "lk": 5, "sk": 4, "tdn": 75, "em": 3000, "calcium": 1.0},
        "grower":   {"pk": 20, "lk": 6, "sk": 4, "tdn": 70, "em": 3100, "calcium": 0.9},
        "finisher": {"pk": 18, "lk": 7, "sk": 4, "tdn": 70, "em": 3200, "calcium": 0.8},
    },
    "layer-chicken": {
        "chick":  {"pk": 20, "lk": 4, "sk": 4, "tdn": 75, "em": 2900, "calcium": 1.0},
        "pullet": {"pk": 16, "lk": 4, "sk": 5, "tdn": 70, "em": 2750, "calcium": 1.2},
        "layer":  {"pk": 18, "lk": 5, "sk": 6, "tdn": 70, "em": 2800, "calcium": 4.0},
    },
}


class RequirementRepository:
    """
    In-memory requirement table, seeded with DEFAULT_REQUIREMENTS.
    Records handed out are copies; edits go through the methods below.
    """

    def __init__(self, table=None):
        source = DEFAULT_REQUIREMENTS if table is None else table
        self._table = {
            animal: {age: NutritionalRequirement(**dict(req)) for age, req in groups.items()}
            for animal, groups in source.items()
        }

    @classmethod
    def from_json(cls, path):
        """Load {animal: {age: {...}}}; falls back to defaults when the file is absent."""
        if not os.path.exists(path):
            logger.warning("Requirement file %s not found, using default tables", path)
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            return cls(json.load(f))

    def animal_types(self):
        return list(self._table)

    def age_groups(self, animal_type):
        if animal_type not in self._table:
            raise KeyError(f"Unknown animal type: {animal_type!r}")
        return list(self._table[animal_type])

    def get(self, animal_type, age_group) -> NutritionalRequirement:
        """
        Raises:
            KeyError: Unknown animal type or age group
        """
        try:
            return self._table[animal_type][age_group].model_copy()
        except KeyError:
            raise KeyError(f"No requirement for {animal_type!r} / {age_group!r}") from None

    def snapshot(self):
        """Deep copy of the whole table as plain dicts."""
        return {
            animal: {age: req.as_dict() for age, req in groups.items()}
            for animal, groups in self._table.items()
        }

    def add_animal_type(self, animal_type, age_group, requirements):
        """
        Raises:
            ValueError: Animal type already exists or name is empty
        """
        animal_type = (animal_type or "").strip()
        age_group = (age_group or "").strip()
        if not animal_type or not age_group:
            raise ValueError("Animal type and age group are required")
        if animal_type in self._table:
            raise ValueError(f"Animal type {animal_type!r} already exists")
        self._table[animal_type] = {age_group: NutritionalRequirement(**dict(requirements))}
        logger.info("Added animal type %s (%s)", animal_type, age_group)

    def add_age_group(self, animal_type, age_group, requirements):
        """
        Raises:
            KeyError: Unknown animal type
            ValueError: Age group already exists or name is empty
        """
        if animal_type not in self._table:
            raise KeyError(f"Unknown animal type: {animal_type!r}")
        age_group = (age_group or "").strip()
        if not age_group:
            raise ValueError("Age group is required")
        if age_group in self._table[animal_type]:
            raise ValueError(f"Age group {age_group!r} already exists for {animal_type!r}")
        self._table[animal_type][age_group] = NutritionalRequirement(**dict(requirements))
        logger.info("Added age group %s/%s", animal_type, age_group)

    def update(self, animal_type, age_group, **changes) -> NutritionalRequirement:
        """Merge changes (None values ignored) into one record and return the new record."""
        current = self.get(animal_type, age_group)
        merged = {**current.as_dict(), **{k: v for k, v in changes.items() if v is not None}}
        updated = NutritionalRequirement(**merged)
        self._table[animal_type][age_group] = updated
        return updated.model_copy()

    def delete_animal_type(self, animal_type):
        if animal_type not in self._table:
            raise KeyError(f"Unknown animal type: {animal_type!r}")
        del self._table[animal_type]

    def delete_age_group(self, animal_type, age_group):
        """
        Raises:
            KeyError: Unknown animal type or age group
            ValueError: It is the animal type's last age group
        """
        groups = self._table.get(animal_type)
        if groups is None or age_group not in groups:
            raise KeyError(f"No requirement for {animal_type!r} / {age_group!r}")
        if len(groups) == 1:
            raise ValueError(f"Cannot delete the last age group of {animal_type!r}")
        del groups[age_group]
