"""Product lookup, search and scoring endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from label_score.api.auth import optional_user_id, require_api_token
from label_score.api.models import (
    ProductBody,
    ProductLookupResponse,
    ProductScoreResponse,
    ScoreRequest,
    ScoreResponse,
    SearchResponse,
)
from label_score.domain.scoring import HealthProfile
from label_score.services.scoring import compute_health_score
from label_score.services.warnings import evaluate_profile_warnings

if TYPE_CHECKING:
    from label_score.containers import AppContainer

router = APIRouter(tags=["products"], dependencies=[Depends(require_api_token)])


@router.post("/score", response_model=ScoreResponse)
async def score_product(body: ScoreRequest) -> ScoreResponse:
    """Score an inline product for an inline health profile."""
    product = body.product.to_domain()
    profile = body.profile.to_domain()
    return ScoreResponse.build(
        compute_health_score(product, profile),
        evaluate_profile_warnings(product, profile),
    )


@router.get("/products/search", response_model=SearchResponse)
async def search_products(
    request: Request,
    q: str = Query(min_length=1),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    nocache: bool = False,
) -> SearchResponse:
    """Search the product catalog."""
    container: AppContainer = request.app.state.container
    products = await container.product_service.search(
        q, page=page, page_size=page_size, nocache=nocache
    )
    return SearchResponse(
        products=[ProductBody.from_domain(product) for product in products],
        page=page,
        page_size=page_size,
    )


@router.get("/products/{barcode}", response_model=ProductLookupResponse)
async def get_product(
    barcode: str, request: Request, nocache: bool = False
) -> ProductLookupResponse:
    """Look up a product by barcode."""
    container: AppContainer = request.app.state.container
    lookup = await container.product_service.get_by_barcode(barcode, nocache=nocache)
    if lookup.product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return ProductLookupResponse.from_domain(lookup)


@router.get("/products/{barcode}/score", response_model=ProductScoreResponse)
async def score_catalog_product(
    barcode: str,
    request: Request,
    profile_id: UUID | None = None,
    user_id: UUID | None = Depends(optional_user_id),
) -> ProductScoreResponse:
    """Score a catalog product for a stored profile.

    Without a profile id the caller's active profile is used, and without a user
    the default adult profile.
    """
    container: AppContainer = request.app.state.container
    lookup = await container.product_service.get_by_barcode(barcode)
    if lookup.product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )

    profile = HealthProfile()
    resolved_profile_id = None
    if user_id is not None:
        record = (
            container.profile_service.get(user_id, profile_id)
            if profile_id
            else container.profile_service.get_active(user_id)
        )
        if record is not None:
            profile = record.to_health_profile()
            resolved_profile_id = record.id
    elif profile_id is not None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id"
        )

    return ProductScoreResponse.build(
        compute_health_score(lookup.product, profile),
        evaluate_profile_warnings(lookup.product, profile),
        product=ProductBody.from_domain(lookup.product, lookup.image_url),
        profile_id=resolved_profile_id,
    )
