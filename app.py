# app.py
import logging
import os
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from models import (
    Ingredient, FormulateRequest, AggregateRequest, FormulaEditRequest,
    FormulaRequest, FormulaCommitRequest, RequirementCreateRequest, RequirementUpdateRequest,
)
from logging_config import setup_logging
from formulation_config import get_config, DEFAULT_PRESET
from requirements_repository import RequirementRepository
from logic_catalog import (
    load_catalog, add_ingredient, update_ingredient, remove_ingredient, find_ingredient, select_ingredients,
)
from logic_allocate import allocate
from logic_aggregate import aggregate
from logic_warnings import nutrient_status
from logic_edit import (
    add_line, set_line_percentage, remove_line, apply_formula,
    redistribute_remainder, total_percentage, total_cost, is_balanced, unused_ingredients,
)

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Feed Formulation API")

# Enable CORS for the calculator frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# load catalog & requirement tables
CATALOG = load_catalog(os.getenv("FEED_CATALOG_PATH", "ingredients.json"))
REQUIREMENTS = (
    RequirementRepository.from_json(os.getenv("FEED_REQUIREMENTS_PATH"))
    if os.getenv("FEED_REQUIREMENTS_PATH")
    else RequirementRepository()
)


def _config(preset):
    try:
        return get_config(preset)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _requirements(body):
    """Explicit requirements win; otherwise look up animal_type/age_group."""
    if body.requirements is not None:
        return body.requirements
    if not body.animal_type or not body.age_group:
        raise HTTPException(status_code=422, detail="Provide requirements or animal_type + age_group")
    try:
        return REQUIREMENTS.get(body.animal_type, body.age_group)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))


def _formula_summary(formula):
    return {
        "formula": formula,
        "total_percentage": round(total_percentage(formula), 2),
        "total_cost": total_cost(formula),
        "balanced": is_balanced(formula),
    }


@app.get("/health")
def health():
    return {
        "status": "ok",
        "ingredients_count": len(CATALOG.ingredients),
        "animal_types": len(REQUIREMENTS.animal_types()),
        "preset": DEFAULT_PRESET,
    }

# ---------------- Ingredients ----------------

@app.get("/ingredients")
def list_ingredients():
    return CATALOG.ingredients


@app.post("/ingredients", status_code=201)
def create_ingredient(ingredient: Ingredient):
    global CATALOG
    try:
        CATALOG = add_ingredient(CATALOG, ingredient)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ingredient


@app.put("/ingredients/{name}")
def edit_ingredient(name: str, ingredient: Ingredient):
    global CATALOG
    if find_ingredient(CATALOG, name) is None:
        raise HTTPException(status_code=404, detail=f"Ingredient {name!r} not found")
    try:
        CATALOG = update_ingredient(CATALOG, name, ingredient)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ingredient


@app.delete("/ingredients/{name}")
def delete_ingredient(name: str):
    global CATALOG
    try:
        CATALOG = remove_ingredient(CATALOG, name)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"status": "deleted", "name": name}

# ---------------- Requirements ----------------

@app.get("/requirements")
def list_requirements():
    return REQUIREMENTS.snapshot()


@app.get("/requirements/{animal_type}/{age_group}")
def get_requirement(animal_type: str, age_group: str):
    try:
        return REQUIREMENTS.get(animal_type, age_group)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))


@app.put("/requirements/{animal_type}/{age_group}")
def update_requirement(animal_type: str, age_group: str, changes: RequirementUpdateRequest):
    try:
        return REQUIREMENTS.update(animal_type, age_group, **changes.model_dump())
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))


@app.post("/requirements", status_code=201)
def create_requirement(body: RequirementCreateRequest):
    try:
        if body.animal_type in REQUIREMENTS.animal_types():
            REQUIREMENTS.add_age_group(body.animal_type, body.age_group, body.requirements.as_dict())
        else:
            REQUIREMENTS.add_animal_type(body.animal_type, body.age_group, body.requirements.as_dict())
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return REQUIREMENTS.get(body.animal_type.strip(), body.age_group.strip())

@app.delete("/requirements/{animal_type}")
def delete_animal_type(animal_type: str):
    try:
        REQUIREMENTS.delete_animal_type(animal_type)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))
    return {"status": "deleted", "animal_type": animal_type}


@app.delete("/requirements/{animal_type}/{age_group}")
def delete_age_group(animal_type: str, age_group: str):
    try:
        REQUIREMENTS.delete_age_group(animal_type, age_group)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"status": "deleted", "animal_type": animal_type, "age_group": age_group}

# ---------------- Formulation ----------------

@app.post("/formulate")
def formulate(body: FormulateRequest):
    config = _config(body.preset)
    requirements = _requirements(body)
    try:
        ingredients = select_ingredients(CATALOG, body.ingredient_names)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info("Formulate request: %d ingredients, preset=%s", len(ingredients), body.preset or "default")
    return allocate(ingredients, requirements, config)


@app.post("/aggregate")
def aggregate_nutrients(body: AggregateRequest):
    totals = aggregate(CATALOG.ingredients, body.percentages)
    response = {"nutritional_values": totals}
    if body.requirements is not None or (body.animal_type and body.age_group):
        response["status"] = nutrient_status(totals, _requirements(body), get_config())
    return response

# ---------------- Formula editing ----------------

@app.post("/formula/add")
def formula_add(body: FormulaEditRequest):
    ingredient = find_ingredient(CATALOG, body.ingredient)
    if ingredient is None:
        raise HTTPException(status_code=404, detail=f"Ingredient {body.ingredient!r} not found")
    try:
        formula = add_line(body.formula, ingredient, body.percentage)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _formula_summary(formula)


@app.post("/formula/set")
def formula_set(body: FormulaEditRequest):
    try:
        formula = set_line_percentage(body.formula, body.ingredient, body.percentage)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _formula_summary(formula)


@app.post("/formula/remove")
def formula_remove(body: FormulaEditRequest):
    try:
        formula = remove_line(body.formula, body.ingredient)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _formula_summary(formula)


@app.post("/formula/redistribute")
def formula_redistribute(body: FormulaCommitRequest):
    config = _config(body.preset)
    requirements = _requirements(body)
    try:
        formula = redistribute_remainder(body.formula, CATALOG.ingredients, requirements, config)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _formula_summary(formula)


@app.post("/formula/unused")
def formula_unused(body: FormulaRequest):
    """Catalog ingredients that can still be added to the formula."""
    return unused_ingredients(body.formula, CATALOG.ingredients)


@app.post("/formula/apply")
def formula_apply(body: FormulaCommitRequest):
    config = _config(body.preset)
    requirements = _requirements(body)
    try:
        return apply_formula(body.formula, CATALOG.ingredients, requirements, config)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
