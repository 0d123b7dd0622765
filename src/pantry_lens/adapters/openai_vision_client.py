"""OpenAI Responses API client for ingredient label extraction."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from pantry_lens.services.vision import VisionClient

_FORMAT_NAME = "ingredient_labels"


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client backed by the OpenAI Responses API."""

    client: AsyncOpenAI
    max_output_tokens: int = 2048

    @classmethod
    def create(cls, api_key: str) -> "OpenAIVisionClient":
        """Create an OpenAI vision client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Request ingredient labels as strict JSON schema output."""
        response = await self.client.responses.create(
            **_build_request(
                model=model,
                reasoning_effort=reasoning_effort,
                store=store,
                image_data_url=image_data_url,
                schema=schema,
                prompt=prompt,
                max_output_tokens=self.max_output_tokens,
            )
        )
        if not response.output_text:
            raise RuntimeError("OpenAI returned an empty response")
        parsed = json.loads(response.output_text)
        if not isinstance(parsed, dict):
            raise RuntimeError("OpenAI returned a non-object payload")
        return parsed

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP client."""
        await self.client.close()


def _build_request(  # noqa: PLR0913
    *,
    model: str,
    reasoning_effort: str | None,
    store: bool,
    image_data_url: str,
    schema: dict[str, object],
    prompt: str,
    max_output_tokens: int,
) -> dict[str, object]:
    request: dict[str, object] = {
        "model": model,
        "instructions": prompt,
        "input": [
            {
                "role": "user",
                "content": [{"type": "input_image", "image_url": image_data_url}],
            }
        ],
        "text": {
            "format": {
                "type": "json_schema",
                "name": _FORMAT_NAME,
                "strict": True,
                "schema": schema,
            }
        },
        "max_output_tokens": max_output_tokens,
        "store": store,
    }
    if reasoning_effort:
        request["reasoning"] = {"effort": reasoning_effort}
    return request
