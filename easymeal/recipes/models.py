from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..llm.models import RecipeIngredient
from ..preferences.models import RecipeType


class RecipeSource(str, Enum):
    ai_generated = "ai_generated"
    manual = "manual"
    imported = "imported"
    community = "community"


class CreateRecipeRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    title: str = Field(..., min_length=1, description="Recipe title is required")
    description: str | None = None
    servings: int = Field(default=4, ge=1)
    prep_time: int | None = Field(default=None, ge=0, alias="prepTime")
    cook_time: int | None = Field(default=None, ge=0, alias="cookTime")
    cuisine: str | None = None
    instructions: list[Any] = Field(default_factory=list)
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    source: RecipeSource = RecipeSource.ai_generated
    type: RecipeType = RecipeType.full_meal


class UpdateRecipeRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    servings: int | None = Field(default=None, ge=1)
    prep_time: int | None = Field(default=None, ge=0, alias="prepTime")
    cook_time: int | None = Field(default=None, ge=0, alias="cookTime")
    cuisine: str | None = None
    instructions: list[Any] | None = None
    ingredients: list[RecipeIngredient] | None = None
    type: RecipeType | None = None

    @model_validator(mode="after")
    def at_least_one_field(self) -> UpdateRecipeRequest:
        if not self.model_fields_set:
            raise ValueError("At least one field is required")
        return self


class Recipe(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    owner: str
    title: str
    description: str | None = None
    servings: int
    prep_time: int | None = Field(default=None, alias="prepTime")
    cook_time: int | None = Field(default=None, alias="cookTime")
    cuisine: str | None = None
    instructions: list[Any] = Field(default_factory=list)
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    source: str
    type: str
    created_at: float = Field(..., alias="createdAt")
    updated_at: float = Field(..., alias="updatedAt")


class NormalizeIngredientsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipe_ingredients: list[str] = Field(..., alias="recipeIngredients")
    existing_ingredients: list[str] = Field(
        default_factory=list, alias="existingIngredients"
    )
