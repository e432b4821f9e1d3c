from __future__ import annotations

import time
import uuid
from typing import Any

from .models import CreateRecipeRequest, Recipe, UpdateRecipeRequest

_recipes: dict[str, Recipe] = {}

# Columns that cannot be cleared by an update.
_REQUIRED = {"title", "servings", "type"}


def _lowercase_ingredients(recipe: Recipe) -> None:
    for ingredient in recipe.ingredients:
        ingredient.name = ingredient.name.lower()


def create_recipe(owner: str, data: CreateRecipeRequest) -> Recipe:
    now = time.time()
    recipe = Recipe(
        id=str(uuid.uuid4()),
        owner=owner,
        created_at=now,
        updated_at=now,
        **data.model_dump(),
    )
    _lowercase_ingredients(recipe)
    _recipes[recipe.id] = recipe
    return recipe


def list_recipes(owner: str) -> list[Recipe]:
    """Recipes belonging to ``owner``, newest first."""
    # Dict order is creation order; updates keep their slot.
    return [r for r in reversed(_recipes.values()) if r.owner == owner]


def get_recipe(owner: str, recipe_id: str) -> Recipe | None:
    recipe = _recipes.get(recipe_id)
    if recipe is None or recipe.owner != owner:
        return None
    return recipe


def update_recipe(
    owner: str,
    recipe_id: str,
    changes: UpdateRecipeRequest,
) -> Recipe | None:
    recipe = get_recipe(owner, recipe_id)
    if recipe is None:
        return None

    updates: dict[str, Any] = {
        key: value
        for key, value in changes.model_dump(exclude_unset=True).items()
        if value is not None or key not in _REQUIRED
    }
    updated = Recipe.model_validate(
        {**recipe.model_dump(), **updates, "updated_at": time.time()}
    )
    _lowercase_ingredients(updated)
    _recipes[recipe_id] = updated
    return updated


def delete_recipe(owner: str, recipe_id: str) -> bool:
    if get_recipe(owner, recipe_id) is None:
        return False
    del _recipes[recipe_id]
    return True


def clear_recipes() -> None:
    _recipes.clear()
