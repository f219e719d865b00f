"""Tests for the Spoonacular food lookup client."""

from __future__ import annotations

import httpx
import pytest

from metabalance.config import settings
from metabalance.tracking.food_lookup import FoodLookupError, extract_nutrients, food_nutrition, search_foods


@pytest.fixture()
def spoonacular_key(monkeypatch):
    monkeypatch.setattr(settings, "spoonacular_api_key", "spoon-key")


class TestExtractNutrients:
    def test_picks_named_nutrients(self):
        nutrients = [
            {"name": "Calories", "amount": 165.4, "unit": "kcal"},
            {"name": "Protein", "amount": 31.02, "unit": "g"},
            {"name": "Fat", "amount": 3.5, "unit": "g"},
            {"name": "Sodium", "amount": 74, "unit": "mg"},
        ]
        assert extract_nutrients(nutrients) == {
            "calories": 165,
            "protein": 31,
            "carbs": 0,
            "fats": 4,
            "fiber": 0,
        }

    def test_first_match_wins(self):
        nutrients = [{"name": "Fiber", "amount": 2}, {"name": "Fiber", "amount": 9}]
        assert extract_nutrients(nutrients)["fiber"] == 2


class TestSearchFoods:
    @pytest.mark.asyncio
    async def test_no_key(self):
        with pytest.raises(FoodLookupError, match="SPOONACULAR_API_KEY"):
            await search_foods("chicken")

    @pytest.mark.asyncio
    async def test_results(self, spoonacular_key):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[{"id": 5062, "name": "chicken breast", "image": "chicken.png"}])

        results = await search_foods("chicken", 5, transport=httpx.MockTransport(handler))
        assert [r.id for r in results] == [5062]
        assert results[0].name == "chicken breast"
        assert seen["path"] == "/food/ingredients/autocomplete"
        assert seen["params"]["query"] == "chicken"
        assert seen["params"]["number"] == "5"
        assert seen["params"]["apiKey"] == "spoon-key"

    @pytest.mark.asyncio
    async def test_api_error(self, spoonacular_key):
        transport = httpx.MockTransport(lambda request: httpx.Response(402))
        with pytest.raises(FoodLookupError, match="Spoonacular API error: 402"):
            await search_foods("rice", transport=transport)


class TestFoodNutrition:
    @pytest.mark.asyncio
    async def test_nutrition(self, spoonacular_key):
        payload = {
            "id": 5062,
            "name": "chicken breast",
            "nutrition": {
                "nutrients": [
                    {"name": "Calories", "amount": 247.5},
                    {"name": "Protein", "amount": 46.5},
                    {"name": "Carbohydrates", "amount": 0},
                ]
            },
        }
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
        food = await food_nutrition(5062, 150, "g", transport=transport)
        assert food.name == "chicken breast"
        assert food.amount == 150
        assert food.calories == 248
        assert food.protein == 47
        assert food.fats == 0
