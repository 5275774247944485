"""Tests for container wiring."""

import asyncio

from label_score.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.product_service is not None
    assert container.bill_service.product_service is container.product_service
    assert container.receipt_service.model == settings.openai_model
    asyncio.run(container.close_resources())
