from __future__ import annotations

from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import require_user
from .auth.models import LoginRequest, ProfileOut, ProfileUpdate, RegisterRequest
from .auth.users import authenticate, get_profile, register_user, update_profile
from .config import DEFAULT_APP_CONFIG
from .llm.groq_client import RecipeGenerationError, generate_recipe, normalize_ingredients
from .llm.models import IngredientCategory
from .middleware.errors import (
    ErrorHandlerMiddleware,
    RequestLoggingMiddleware,
    recipe_generation_error_handler,
)
from .middleware.rate_limit import RateLimiter, RateLimitMiddleware
from .middleware.security import (
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
    is_valid_uuid,
    sanitize_preferences,
)
from .preferences.models import (
    CookingMethod,
    DietaryRestriction,
    MealType,
    RecipePreferences,
    RecipeType,
)
from .preferences.prompt import TIME_CONSTRAINT_PHRASES
from .recipes import store
from .recipes.models import (
    CreateRecipeRequest,
    NormalizeIngredientsRequest,
    Recipe,
    UpdateRecipeRequest,
)

config = DEFAULT_APP_CONFIG
rate_limiter = RateLimiter(config.rate_limit_window, config.rate_limit_max)

app = FastAPI(title="Easy Meal API", version="1.0.0")
app.add_exception_handler(RecipeGenerationError, recipe_generation_error_handler)

# Added innermost first: sessions sit closest to the routes.
app.add_middleware(SessionMiddleware, secret_key=config.session_secret)
app.add_middleware(RateLimitMiddleware, limiter=rate_limiter)
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=config.max_request_bytes)
app.add_middleware(ErrorHandlerMiddleware, production=config.is_production)
app.add_middleware(SecurityHeadersMiddleware)
if config.is_production:
    app.add_middleware(RequestLoggingMiddleware)


def _owned_recipe_or_404(username: str, recipe_id: str) -> Recipe:
    if not is_valid_uuid(recipe_id):
        raise HTTPException(status_code=400, detail="Invalid recipe id")
    recipe = store.get_recipe(username, recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/api/meta/options")
def options() -> dict:
    return {
        "mealTypes": [m.value for m in MealType],
        "recipeTypes": [r.value for r in RecipeType],
        "cookingMethods": [c.value for c in CookingMethod],
        "timeConstraints": TIME_CONSTRAINT_PHRASES,
        "dietaryRestrictions": [d.value for d in DietaryRestriction],
        "ingredientCategories": [c.value for c in IngredientCategory],
    }


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/api/auth/register", status_code=201)
def register(body: RegisterRequest, request: Request) -> dict:
    profile = register_user(body.username, body.password, name=body.name)
    if profile is None:
        raise HTTPException(status_code=409, detail="Username already taken")
    request.session["user"] = {"username": body.username}
    return {"status": "ok", "user": ProfileOut(**profile)}


@app.post("/api/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/api/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/api/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Profile endpoints ────────────────────────────────────────────────────


@app.get("/api/users/me")
def profile_me(user: dict = Depends(require_user)) -> dict:
    profile = get_profile(user["username"])
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"data": ProfileOut(**profile)}


@app.patch("/api/users/me")
def patch_profile_me(body: ProfileUpdate, user: dict = Depends(require_user)) -> dict:
    profile = update_profile(
        user["username"],
        name=body.name,
        dietary_restrictions=body.dietary_restrictions,
    )
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"data": ProfileOut(**profile)}


# ── Recipe endpoints ─────────────────────────────────────────────────────


@app.post("/api/recipes/generate")
def generate(body: RecipePreferences, user: dict = Depends(require_user)) -> dict:
    preferences = sanitize_preferences(body)

    # Fall back to the profile's restrictions when the request names none.
    if not preferences.dietary_restrictions:
        profile = get_profile(user["username"]) or {}
        if profile.get("dietary_restrictions"):
            preferences = preferences.model_copy(
                update={"dietary_restrictions": profile["dietary_restrictions"]}
            )

    return {"data": generate_recipe(preferences)}


@app.post("/api/recipes", status_code=201)
def create_recipe(body: CreateRecipeRequest, user: dict = Depends(require_user)) -> dict:
    return {"data": store.create_recipe(user["username"], body)}


@app.get("/api/recipes")
def list_recipes(user: dict = Depends(require_user)) -> dict:
    return {"data": store.list_recipes(user["username"])}


@app.get("/api/recipes/{recipe_id}")
def get_recipe(recipe_id: str, user: dict = Depends(require_user)) -> dict:
    return {"data": _owned_recipe_or_404(user["username"], recipe_id)}


@app.patch("/api/recipes/{recipe_id}")
def patch_recipe(
    recipe_id: str,
    body: UpdateRecipeRequest,
    user: dict = Depends(require_user),
) -> dict:
    _owned_recipe_or_404(user["username"], recipe_id)
    return {"data": store.update_recipe(user["username"], recipe_id, body)}


@app.delete("/api/recipes/{recipe_id}", status_code=204)
def delete_recipe(recipe_id: str, user: dict = Depends(require_user)) -> Response:
    _owned_recipe_or_404(user["username"], recipe_id)
    store.delete_recipe(user["username"], recipe_id)
    return Response(status_code=204)


@app.post("/api/ingredients/normalize")
def normalize(
    body: NormalizeIngredientsRequest,
    user: dict = Depends(require_user),
) -> dict:
    matches = normalize_ingredients(body.recipe_ingredients, body.existing_ingredients)
    return {"data": matches}
