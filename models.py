# models.py
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from typing import List, Dict, Optional

NUTRIENTS = ["pk", "lk", "sk", "tdn", "em", "calcium"]

NUTRIENT_LABELS = {
    "pk": "PK",
    "lk": "LK",
    "sk": "SK",
    "tdn": "TDN",
    "em": "EM",
    "calcium": "CALCIUM",
}


class Ingredient(BaseModel):
    id: Optional[str] = None
    name: str
    bk: float = Field(..., ge=0, allow_inf_nan=False)       # dry matter (%)
    pk: float = Field(..., ge=0, allow_inf_nan=False)       # crude protein (%)
    lk: float = Field(..., ge=0, allow_inf_nan=False)       # crude fat (%)
    sk: float = Field(..., ge=0, allow_inf_nan=False)       # crude fiber (%)
    tdn: float = Field(..., ge=0, allow_inf_nan=False)      # total digestible nutrients (%)
    em: float = Field(..., ge=0, allow_inf_nan=False)       # metabolizable energy (kcal/kg)
    calcium: float = Field(..., ge=0, allow_inf_nan=False)  # (%)
    price_per_kg: float = Field(..., ge=0, allow_inf_nan=False)
    max_sk: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("ingredient name must not be empty")
        return v

    def nutrient(self, axis: str) -> float:
        return getattr(self, axis)


class NutrientProfile(BaseModel):
    pk: float = 0.0
    lk: float = 0.0
    sk: float = 0.0
    tdn: float = 0.0
    em: float = 0.0        # kcal/kg, not a percentage
    calcium: float = 0.0

    def nutrient(self, axis: str) -> float:
        return getattr(self, axis)

    def as_dict(self) -> Dict[str, float]:
        return {axis: getattr(self, axis) for axis in NUTRIENTS}


class NutritionalRequirement(NutrientProfile):
    pk: float = Field(0.0, ge=0, allow_inf_nan=False)
    lk: float = Field(0.0, ge=0, allow_inf_nan=False)
    sk: float = Field(0.0, ge=0, allow_inf_nan=False)
    tdn: float = Field(0.0, ge=0, allow_inf_nan=False)
    em: float = Field(0.0, ge=0, allow_inf_nan=False)
    calcium: float = Field(0.0, ge=0, allow_inf_nan=False)


class NutrientTotals(NutrientProfile):
    pass


class FormulaLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    ingredient: str
    percentage: float
    cost_per_kg: float

    @computed_field
    @property
    def total_cost(self) -> float:
        return round(self.cost_per_kg * self.percentage / 100, 2)


class FormulationResult(BaseModel):
    results: List[FormulaLine] = []
    total_cost: float = 0.0
    nutritional_values: NutrientTotals = Field(default_factory=NutrientTotals)
    warnings: List[str] = []


class Catalog(BaseModel):
    ingredients: List[Ingredient] = []

    @model_validator(mode="after")
    def _unique_names(self):
        seen = set()
        for ing in self.ingredients:
            if ing.name in seen:
                raise ValueError(f"Duplicate ingredient name: {ing.name!r}")
            seen.add(ing.name)
        return self


# ---------------- HTTP request bodies ----------------

class FormulateRequest(BaseModel):
    animal_type: Optional[str] = None
    age_group: Optional[str] = None
    requirements: Optional[NutritionalRequirement] = None
    ingredient_names: Optional[List[str]] = None   # subset of the catalog; None = all
    preset: Optional[str] = None


class AggregateRequest(BaseModel):
    percentages: Dict[str, float]
    animal_type: Optional[str] = None
    age_group: Optional[str] = None
    requirements: Optional[NutritionalRequirement] = None


class FormulaEditRequest(BaseModel):
    formula: List[FormulaLine]
    ingredient: str
    percentage: float = 0.0


class FormulaRequest(BaseModel):
    formula: List[FormulaLine]


class FormulaCommitRequest(BaseModel):
    formula: List[FormulaLine]
    animal_type: Optional[str] = None
    age_group: Optional[str] = None
    requirements: Optional[NutritionalRequirement] = None
    preset: Optional[str] = None


class RequirementCreateRequest(BaseModel):
    animal_type: str
    age_group: str
    requirements: NutritionalRequirement


class RequirementUpdateRequest(BaseModel):
    pk: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    lk: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    sk: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    tdn: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    em: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    calcium: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
