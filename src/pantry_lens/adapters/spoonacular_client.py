"""Spoonacular recipe API client."""

from dataclasses import dataclass

import httpx

from pantry_lens.services.recipes import RecipeClient


@dataclass
class HttpxSpoonacularClient(RecipeClient):
    """HTTPX-backed Spoonacular client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 15
    ) -> "HttpxSpoonacularClient":
        """Create a Spoonacular client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def find_by_ingredients(
        self,
        ingredients: list[str],
        *,
        number: int,
        ranking: int,
        diet: str | None = None,
    ) -> list[dict[str, object]]:
        """Search recipes that use the given ingredients."""
        params: dict[str, str | int] = {
            "ingredients": ",".join(ingredients),
            "number": number,
            "ranking": ranking,
            "ignorePantry": "false",
            "limitLicense": "false",
        }
        if diet:
            params["diet"] = diet
        return await self._get("/recipes/findByIngredients", params)

    async def get_nutrition_widget(self, recipe_id: int) -> dict[str, object]:
        """Fetch per-serving nutrition for a recipe."""
        return await self._get(f"/recipes/{recipe_id}/nutritionWidget.json")

    async def get_information(self, recipe_id: int) -> dict[str, object]:
        """Fetch the full recipe with nutrition."""
        return await self._get(
            f"/recipes/{recipe_id}/information", {"includeNutrition": "true"}
        )

    async def complex_search(
        self, query: str, *, number: int, max_calories: int | None = None
    ) -> dict[str, object]:
        """Search recipes by keywords."""
        params: dict[str, str | int] = {
            "query": query,
            "number": number,
            "addRecipeInformation": "true",
            "addRecipeNutrition": "true",
            "fillIngredients": "true",
        }
        if max_calories:
            params["maxCalories"] = max_calories
        return await self._get("/recipes/complexSearch", params)

    async def random_recipes(self, number: int = 1) -> dict[str, object]:
        """Fetch random recipes."""
        return await self._get("/recipes/random", {"number": number})

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get(
        self, path: str, params: dict[str, str | int] | None = None
    ) -> "list[dict[str, object]] | dict[str, object]":
        response = await self.http_client.get(
            f"{self.base_url}{path}",
            params={"apiKey": self.api_key, **(params or {})},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()
