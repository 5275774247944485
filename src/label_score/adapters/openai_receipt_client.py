"""OpenAI Responses API client for receipt reading."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from label_score.services.receipts import ReceiptVisionClient


@dataclass
class OpenAIReceiptClient(ReceiptVisionClient):
    """Receipt vision client backed by the OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIReceiptClient":
        """Create an OpenAI receipt client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def extract(
        self,
        *,
        model: str,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Call the Responses API with a strict JSON schema."""
        response = await self.client.responses.create(
            model=model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": image_data_url},
                    ],
                }
            ],
            text={
                "format": {
                    "type": "json_schema",
                    "name": "receipt_extract",
                    "strict": True,
                    "schema": schema,
                }
            },
            store=False,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()
