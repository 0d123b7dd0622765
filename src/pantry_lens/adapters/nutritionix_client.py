"""Nutritionix natural-language nutrition API client."""

from dataclasses import dataclass

import httpx

from pantry_lens.services.meals import NaturalNutritionClient


@dataclass
class HttpxNutritionixClient(NaturalNutritionClient):
    """HTTPX-backed Nutritionix client."""

    app_id: str
    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, app_id: str, api_key: str, base_url: str, timeout_seconds: float = 15
    ) -> "HttpxNutritionixClient":
        """Create a Nutritionix client with a managed httpx session."""
        return cls(
            app_id=app_id,
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        """Resolve a phrase like `2 eggs` into foods with nutrients."""
        response = await self.http_client.post(
            f"{self.base_url}/natural/nutrients",
            headers=self._headers(),
            json={"query": query},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def search_instant(self, query: str) -> dict[str, object]:
        """Return common and branded food suggestions."""
        response = await self.http_client.get(
            f"{self.base_url}/search/instant",
            headers=self._headers(),
            params={"query": query},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"x-app-id": self.app_id, "x-app-key": self.api_key}
