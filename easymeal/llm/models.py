from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IngredientCategory(str, Enum):
    produce = "produce"
    dairy = "dairy"
    meat = "meat"
    seafood = "seafood"
    pantry = "pantry"
    frozen = "frozen"
    bakery = "bakery"
    beverages = "beverages"
    other = "other"


def _coerce_category(value: object) -> object:
    # Model output drifts from the category list; anything unknown files under "other".
    if isinstance(value, str):
        value = value.strip().lower()
        return value if value in IngredientCategory.__members__ else IngredientCategory.other
    return value


class RecipeIngredient(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: float
    unit: str
    category: IngredientCategory = IngredientCategory.other
    preparation: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, value: object) -> object:
        return _coerce_category(value)


class InstructionStep(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    step_number: int = Field(..., alias="stepNumber")
    text: str


class GeneratedRecipe(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: str | None = None
    servings: int | None = None
    prep_time: int | None = Field(default=None, alias="prepTime")
    cook_time: int | None = Field(default=None, alias="cookTime")
    cuisine: str | None = None
    ingredients: list[RecipeIngredient]
    instructions: list[InstructionStep]


class IngredientMatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipe_ingredient: str = Field(..., alias="recipeIngredient")
    matched_to: str = Field(..., alias="matchedTo")
    is_new: bool = Field(..., alias="isNew")
    category: IngredientCategory | None = None

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, value: object) -> object:
        return _coerce_category(value)
