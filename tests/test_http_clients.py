"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from label_score.adapters.off_client import HttpxOffClient
from label_score.adapters.openai_receipt_client import OpenAIReceiptClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str) -> None:
        self.responses = _FakeResponses(output_text)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def _off_client(handler) -> HttpxOffClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxOffClient(
        base_url="https://off.test/api/v2",
        user_agent="label-score-tests",
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_openai_receipt_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps({"line_items": []}))
    client = OpenAIReceiptClient(client=fake)

    result = asyncio.run(
        client.extract(
            model="gpt-4.1-mini",
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            schema={"type": "object"},
            prompt="Read the receipt",
        )
    )
    asyncio.run(client.close())

    assert result == {"line_items": []}
    payload = fake.responses.last_payload
    assert payload["store"] is False
    assert payload["text"]["format"]["strict"] is True
    assert payload["input"][0]["content"][1]["image_url"].startswith("data:image")
    assert fake.closed


def test_openai_receipt_client_rejects_empty_output() -> None:
    client = OpenAIReceiptClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.extract(
                model="gpt-4.1-mini",
                image_data_url="data:image/jpeg;base64,ZmFrZQ==",
                schema={"type": "object"},
                prompt="Read the receipt",
            )
        )


def test_off_client_get_product() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v2/product/8901.json"
        assert "nutriments" in request.url.params["fields"]
        return httpx.Response(
            200, json={"status": 1, "product": {"code": "8901", "product_name": "X"}}
        )

    product = asyncio.run(_off_client(handler).get_product("8901"))

    assert product == {"code": "8901", "product_name": "X"}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"status": 0}),
        httpx.Response(200, json={"status": 0, "status_verbose": "product not found"}),
    ],
)
def test_off_client_unknown_product(response: httpx.Response) -> None:
    product = asyncio.run(_off_client(lambda request: response).get_product("1"))

    assert product is None


def test_off_client_raises_on_server_error() -> None:
    client = _off_client(lambda request: httpx.Response(503))

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_product("1"))


def test_off_client_search() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v2/search"
        assert request.url.params["search_terms"] == "maggi"
        assert request.url.params["page_size"] == "5"
        return httpx.Response(200, json={"products": [{"code": "1"}]})

    client = _off_client(handler)

    results = asyncio.run(client.search_products("maggi", page_size=5))
    asyncio.run(client.close())

    assert results == [{"code": "1"}]


def test_off_client_create_sets_user_agent() -> None:
    client = HttpxOffClient.create("https://off.test/api/v2", "label-score/1.0")

    assert client.http_client.headers["User-Agent"] == "label-score/1.0"
    asyncio.run(client.close())
