"""Google Cloud Vision `images:annotate` client."""

from dataclasses import dataclass

import httpx

from pantry_lens.services.vision import GoogleVisionClient


@dataclass
class HttpxGoogleVisionClient(GoogleVisionClient):
    """HTTPX-backed Google Vision client using an API key."""

    api_key: str
    url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, api_key: str, url: str, timeout_seconds: float = 15
    ) -> "HttpxGoogleVisionClient":
        """Create a Vision client with a managed httpx session."""
        return cls(
            api_key=api_key,
            url=url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def annotate(self, payload: dict[str, object]) -> dict[str, object]:
        """Send an annotate request and return the raw response."""
        response = await self.http_client.post(
            self.url,
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
