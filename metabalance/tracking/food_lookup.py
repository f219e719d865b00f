"""Spoonacular ingredient search and per-amount nutrition."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from metabalance.config import settings
from metabalance.tracking.features import round_half_up
from metabalance.tracking.models import FoodNutrition, FoodSearchResult

logger = logging.getLogger(__name__)

# Spoonacular nutrient name -> FoodNutrition field
NUTRIENT_FIELDS: dict[str, str] = {
    "Calories": "calories",
    "Protein": "protein",
    "Carbohydrates": "carbs",
    "Fat": "fats",
    "Fiber": "fiber",
}


class FoodLookupError(RuntimeError):
    """Spoonacular is not configured or answered with an error."""


async def _get(path: str, params: dict[str, Any], transport: httpx.AsyncBaseTransport | None) -> Any:
    if not settings.spoonacular_api_key:
        raise FoodLookupError("SPOONACULAR_API_KEY is not configured")

    url = f"{settings.spoonacular_base_url.rstrip('/')}{path}"
    query = {"apiKey": settings.spoonacular_api_key, **params}
    try:
        async with httpx.AsyncClient(timeout=settings.food_timeout_s, transport=transport) as client:
            resp = await client.get(url, params=query)
    except httpx.HTTPError as exc:
        logger.warning("Spoonacular request to %s failed: %s", path, exc)
        raise FoodLookupError(f"Spoonacular request failed: {exc}") from exc

    if resp.status_code >= 400:
        logger.warning("Spoonacular %s returned %s", path, resp.status_code)
        raise FoodLookupError(f"Spoonacular API error: {resp.status_code} {resp.reason_phrase}")
    try:
        return resp.json()
    except ValueError as exc:
        raise FoodLookupError("Spoonacular returned invalid JSON") from exc


def extract_nutrients(nutrients: list[dict[str, Any]]) -> dict[str, int]:
    """Pick the tracked nutrients by exact name, rounded; missing ones are 0."""
    out = {field: 0 for field in NUTRIENT_FIELDS.values()}
    seen: set[str] = set()
    for n in nutrients:
        field = NUTRIENT_FIELDS.get(n.get("name", ""))
        if field is None or field in seen:
            continue
        seen.add(field)
        out[field] = round_half_up(float(n.get("amount") or 0))
    return out


async def search_foods(
    query: str,
    limit: int = 10,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[FoodSearchResult]:
    data = await _get(
        "/food/ingredients/autocomplete",
        {"query": query, "number": limit, "metaInformation": "true"},
        transport,
    )
    if not isinstance(data, list):
        return []
    return [
        FoodSearchResult(id=item["id"], name=item.get("name", ""), image=item.get("image"))
        for item in data
        if isinstance(item, dict) and "id" in item
    ]


async def food_nutrition(
    ingredient_id: int,
    amount: float = 100,
    unit: str = "g",
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FoodNutrition:
    data = await _get(
        f"/food/ingredients/{ingredient_id}/information",
        {"amount": amount, "unit": unit},
        transport,
    )
    nutrients = ((data or {}).get("nutrition") or {}).get("nutrients") or []
    return FoodNutrition(
        id=ingredient_id,
        name=(data or {}).get("name", ""),
        amount=amount,
        unit=unit,
        **extract_nutrients(nutrients),
    )
