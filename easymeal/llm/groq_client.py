from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from groq import Groq
from pydantic import ValidationError

from ..preferences.models import RecipePreferences
from ..preferences.prompt import build_preferences_prompt
from .config import DEFAULT_LLM_CONFIG, LLMConfig
from .models import GeneratedRecipe, IngredientMatch

logger = logging.getLogger(__name__)


class RecipeGenerationError(Exception):
    """The model could not be reached or returned something unusable."""


class LLMUnavailableError(RecipeGenerationError):
    """No LLM is configured for this process."""


RECIPE_GENERATION_PROMPT = """\
You are a professional chef assistant that creates detailed, delicious recipes \
based on user preferences.

Given the user's preferences, generate a complete recipe in JSON format.

IMPORTANT RULES:
1. All ingredient quantities must be numeric (use decimals like 0.5, 0.25, 0.33)
2. Use standard US cooking units (cup, tbsp, tsp, oz, lb, piece, clove, etc.)
3. Respect ALL dietary restrictions - never include restricted ingredients
4. Category must be one of: produce, dairy, meat, seafood, pantry, frozen, bakery, beverages, other
5. Keep instructions clear and numbered
6. Prep time and cook time in minutes

Respond ONLY with valid JSON matching this exact structure:
{
  "title": "Recipe Title",
  "description": "Brief appetizing description",
  "servings": 4,
  "prepTime": 15,
  "cookTime": 30,
  "cuisine": "Italian",
  "ingredients": [
    {
      "name": "ingredient name (lowercase, canonical form)",
      "quantity": 1.5,
      "unit": "cup",
      "category": "produce",
      "preparation": "diced"
    }
  ],
  "instructions": [
    {"stepNumber": 1, "text": "First step..."},
    {"stepNumber": 2, "text": "Second step..."}
  ]
}"""

INGREDIENT_MATCHING_PROMPT = """\
You are a kitchen ingredient database assistant.

Given a list of ingredient names from a recipe and a list of existing ingredients \
in the database, determine which recipe ingredients match existing database \
entries and which are new.

For each recipe ingredient, either:
1. Match it to an existing database ingredient (use exact database name)
2. Mark it as new and provide a canonical name

Rules for canonical names:
- Lowercase
- Singular form (not plural)
- No brand names
- Most common/general term (e.g., "olive oil" not "extra virgin olive oil")
- Category must be one of: produce, dairy, meat, seafood, pantry, frozen, bakery, beverages, other

Respond ONLY with valid JSON:
{
  "matches": [
    {"recipeIngredient": "diced tomatoes", "matchedTo": "tomato", "isNew": false},
    {"recipeIngredient": "fresh basil leaves", "matchedTo": "basil", "isNew": false},
    {"recipeIngredient": "pancetta", "matchedTo": "pancetta", "isNew": true, "category": "meat"}
  ]
}"""

_FENCED_JSON_RE = re.compile(r"```json\n?([\s\S]*?)\n?```")
_BARE_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


# ── Prompt assembly ──────────────────────────────────────────────────────


def build_recipe_messages(
    preferences: RecipePreferences | Mapping[str, Any],
) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": RECIPE_GENERATION_PROMPT},
        {
            "role": "user",
            "content": f"User Preferences:\n{build_preferences_prompt(preferences)}",
        },
    ]


def _bullet_list(items: list[str], empty: str) -> str:
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


def build_ingredient_matching_message(
    recipe_ingredients: list[str],
    existing_ingredients: list[str],
) -> str:
    return (
        "Recipe ingredients to process:\n"
        f"{_bullet_list(recipe_ingredients, '(none)')}\n\n"
        "Existing ingredients in database:\n"
        f"{_bullet_list(existing_ingredients, '(database is empty)')}"
    )


# ── Response parsing ─────────────────────────────────────────────────────


def extract_json(text: str) -> str:
    """
    Pull the JSON payload out of a model reply.

    Prefers a fenced ```json block and falls back to the outermost braces.
    """
    match = _FENCED_JSON_RE.search(text) or _BARE_OBJECT_RE.search(text)
    if not match:
        raise RecipeGenerationError("Failed to parse JSON from AI response")
    return match.group(1) if match.groups() else match.group(0)


def _load_json(text: str) -> Any:
    try:
        return json.loads(extract_json(text))
    except json.JSONDecodeError as exc:
        raise RecipeGenerationError("AI response was not valid JSON") from exc


def parse_generated_recipe(text: str) -> GeneratedRecipe:
    data = _load_json(text)
    try:
        return GeneratedRecipe.model_validate(data)
    except ValidationError as exc:
        raise RecipeGenerationError("Invalid recipe structure from AI") from exc


def parse_ingredient_matches(text: str) -> list[IngredientMatch]:
    data = _load_json(text)
    if not isinstance(data, dict) or not isinstance(data.get("matches"), list):
        raise RecipeGenerationError("Failed to parse ingredient matches from AI response")
    try:
        return [IngredientMatch.model_validate(item) for item in data["matches"]]
    except ValidationError as exc:
        raise RecipeGenerationError("Invalid ingredient match structure from AI") from exc


# ── Groq calls ───────────────────────────────────────────────────────────


def _complete(messages: list[dict[str, str]], config: LLMConfig) -> str:
    if not config.enabled or not config.api_key:
        raise LLMUnavailableError("AI recipe generation is not configured")

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=messages,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )
    except Exception as exc:
        logger.warning("Groq LLM call failed", exc_info=True)
        raise RecipeGenerationError("AI service request failed") from exc

    return response.choices[0].message.content or ""


def generate_recipe(
    preferences: RecipePreferences | Mapping[str, Any],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> GeneratedRecipe:
    """
    Ask the LLM for a complete recipe that honours ``preferences``.

    Raises ``LLMUnavailableError`` when no LLM is configured and
    ``RecipeGenerationError`` when the call fails or the reply is not a recipe.
    """
    content = _complete(build_recipe_messages(preferences), config)
    recipe = parse_generated_recipe(content)
    logger.info(
        "Generated recipe %r with %d ingredients",
        recipe.title,
        len(recipe.ingredients),
    )
    return recipe


def normalize_ingredients(
    recipe_ingredients: list[str],
    existing_ingredients: list[str],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[IngredientMatch]:
    """
    Map recipe ingredient names onto existing database entries.

    Each name is either matched to an existing ingredient or given a canonical
    name and flagged as new.
    """
    if not recipe_ingredients:
        return []

    messages = [
        {"role": "system", "content": INGREDIENT_MATCHING_PROMPT},
        {
            "role": "user",
            "content": build_ingredient_matching_message(
                recipe_ingredients, existing_ingredients
            ),
        },
    ]
    return parse_ingredient_matches(_complete(messages, config))
