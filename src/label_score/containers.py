"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from label_score.adapters.off_client import HttpxOffClient
from label_score.adapters.openai_receipt_client import OpenAIReceiptClient
from label_score.adapters.supabase_product_repository import (
    SupabaseProductRepository,
)
from label_score.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from label_score.adapters.supabase_receipt_repository import (
    SupabaseReceiptRepository,
)
from label_score.config import Settings
from label_score.services.bills import BillService
from label_score.services.cache import InMemoryCache
from label_score.services.products import ProductService
from label_score.services.profiles import ProfileService
from label_score.services.receipts import ReceiptService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    product_service: ProductService
    profile_service: ProfileService
    receipt_service: ReceiptService
    bill_service: BillService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    off_client = HttpxOffClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
    )
    product_service = ProductService(
        off_client=off_client,
        repository=SupabaseProductRepository(supabase_client),
        cache=InMemoryCache(),
        stale_after_seconds=resolved_settings.product_stale_after_seconds,
        search_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    receipt_client = OpenAIReceiptClient.create(resolved_settings.openai_api_key)
    receipt_service = ReceiptService(
        client=receipt_client,
        repository=SupabaseReceiptRepository(supabase_client),
        model=resolved_settings.openai_model,
    )
    bill_service = BillService(product_service)

    async def close_resources() -> None:
        await off_client.close()
        await receipt_client.close()

    return AppContainer(
        settings=resolved_settings,
        product_service=product_service,
        profile_service=profile_service,
        receipt_service=receipt_service,
        bill_service=bill_service,
        close_resources=close_resources,
    )
