from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from .models import RecipePreferences, TimeConstraint

NO_PREFERENCES_PROMPT = "No specific preferences - create a delicious, balanced meal"

TIME_CONSTRAINT_PHRASES: dict[str, str] = {
    TimeConstraint.quick.value: "under 30 minutes",
    TimeConstraint.medium.value: "30-60 minutes",
    TimeConstraint.leisurely.value: "over 60 minutes",
}

_ALIASES = {
    name: field.alias or name for name, field in RecipePreferences.model_fields.items()
}


def _get(prefs: RecipePreferences | Mapping[str, Any], name: str) -> Any:
    if isinstance(prefs, RecipePreferences):
        return getattr(prefs, name)
    return prefs.get(_ALIASES[name]) or prefs.get(name)


def _get_list(prefs: RecipePreferences | Mapping[str, Any], name: str) -> list[Any]:
    # Anything other than a list or tuple is treated as absent.
    value = _get(prefs, name)
    return list(value) if isinstance(value, (list, tuple)) else []


def _text(value: Any) -> str:
    return str(value.value if isinstance(value, Enum) else value)


def _join(values: Any) -> str:
    return ", ".join(_text(v) for v in values)


def build_preferences_prompt(prefs: RecipePreferences | Mapping[str, Any]) -> str:
    """
    Render preferences as the bulleted block embedded in the generation prompt.

    Lines follow a fixed order and absent, empty or zero values are skipped.
    Returns ``NO_PREFERENCES_PROMPT`` when nothing was rendered.
    """
    lines: list[str] = []

    if _get(prefs, "protein"):
        lines.append(f"- Protein: {_text(_get(prefs, 'protein'))}")
    vegetables = _get_list(prefs, "vegetables")
    if vegetables:
        lines.append(f"- Vegetables: {_join(vegetables)}")
    fruits = _get_list(prefs, "fruits")
    if fruits:
        lines.append(f"- Fruits: {_join(fruits)}")
    if _get(prefs, "cuisine"):
        lines.append(f"- Cuisine style: {_text(_get(prefs, 'cuisine'))}")
    if _get(prefs, "meal_type"):
        lines.append(f"- Meal type: {_text(_get(prefs, 'meal_type'))}")
    if _get(prefs, "recipe_type"):
        lines.append(f"- Recipe type: {_text(_get(prefs, 'recipe_type'))}")
    if _get(prefs, "cooking_method"):
        lines.append(f"- Cooking method: {_text(_get(prefs, 'cooking_method'))}")

    time_constraint = _get(prefs, "time_constraint")
    if time_constraint:
        phrase = TIME_CONSTRAINT_PHRASES.get(_text(time_constraint))
        if phrase:
            lines.append(f"- Time constraint: {phrase}")

    # Falsy check: servings=0 renders nothing, same as absent.
    if _get(prefs, "servings"):
        lines.append(f"- Servings: {_get(prefs, 'servings')}")
    restrictions = _get_list(prefs, "dietary_restrictions")
    if restrictions:
        lines.append(f"- DIETARY RESTRICTIONS (MUST RESPECT): {_join(restrictions)}")
    if _get(prefs, "additional_notes"):
        lines.append(f"- Additional notes: {_text(_get(prefs, 'additional_notes'))}")

    return "\n".join(lines) if lines else NO_PREFERENCES_PROMPT
