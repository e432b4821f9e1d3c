from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class RecipeType(str, Enum):
    full_meal = "full_meal"
    entree = "entree"
    side = "side"
    dessert = "dessert"
    appetizer = "appetizer"
    snack = "snack"
    drink = "drink"
    other = "other"


class CookingMethod(str, Enum):
    """Suggested cooking methods for UI pick-lists.

    The ``cooking_method`` field itself accepts any text.
    """

    stovetop = "stovetop"
    oven = "oven"
    grill = "grill"
    slow_cooker = "slow-cooker"
    instant_pot = "instant-pot"
    air_fryer = "air-fryer"
    no_cook = "no-cook"


class TimeConstraint(str, Enum):
    quick = "quick"
    medium = "medium"
    leisurely = "leisurely"


class DietaryRestriction(str, Enum):
    vegetarian = "vegetarian"
    vegan = "vegan"
    gluten_free = "gluten-free"
    dairy_free = "dairy-free"
    nut_free = "nut-free"
    keto = "keto"
    low_sodium = "low-sodium"
    halal = "halal"
    kosher = "kosher"


class RecipePreferences(BaseModel):
    """What the user wants from a generated recipe. Every field is optional."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        use_enum_values=True,
    )

    protein: str | None = None
    vegetables: list[str] = Field(default_factory=list)
    fruits: list[str] = Field(default_factory=list)
    cuisine: str | None = None
    meal_type: MealType | None = Field(default=None, alias="mealType")
    recipe_type: RecipeType | None = Field(default=None, alias="recipeType")
    cooking_method: str | None = Field(default=None, alias="cookingMethod")
    time_constraint: TimeConstraint | None = Field(default=None, alias="timeConstraint")
    servings: int | None = None
    dietary_restrictions: list[DietaryRestriction] = Field(
        default_factory=list, alias="dietaryRestrictions"
    )
    additional_notes: str | None = Field(default=None, alias="additionalNotes")
