"""Bill scoring endpoints."""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status

from label_score.api.auth import optional_user_id, require_api_token
from label_score.api.models import BillParseRequest, BillResponse, BillScoreRequest
from label_score.domain.scoring import HealthProfile

if TYPE_CHECKING:
    from label_score.containers import AppContainer

router = APIRouter(
    prefix="/bills", tags=["bills"], dependencies=[Depends(require_api_token)]
)


@router.post("/score", response_model=BillResponse)
async def score_bill(
    body: BillScoreRequest,
    request: Request,
    user_id: UUID | None = Depends(optional_user_id),
) -> BillResponse:
    """Grade bill lines and compute the weighted bill score."""
    container: AppContainer = request.app.state.container
    profile = _resolve_profile(container, user_id, body.profile_id)
    summary = await container.bill_service.score_lines(
        [item.to_domain() for item in body.items], profile
    )
    return BillResponse.from_domain(summary)


@router.post("/parse", response_model=BillResponse)
async def parse_bill(
    body: BillParseRequest,
    request: Request,
    user_id: UUID | None = Depends(optional_user_id),
) -> BillResponse:
    """Read and store a receipt image, then grade its lines."""
    container: AppContainer = request.app.state.container
    try:
        image_bytes = base64.b64decode(body.image_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid base64 image"
        ) from exc
    profile = _resolve_profile(container, user_id, body.profile_id)
    receipt = await container.receipt_service.extract(image_bytes, user_id=user_id)
    extract = receipt.extract
    summary = await container.bill_service.score_lines(extract.line_items, profile)
    return BillResponse.from_domain(
        summary, merchant=extract.merchant, date=extract.date, receipt_id=receipt.id
    )


def _resolve_profile(
    container: AppContainer, user_id: UUID | None, profile_id: UUID | None
) -> HealthProfile:
    if user_id is None:
        return HealthProfile()
    record = (
        container.profile_service.get(user_id, profile_id)
        if profile_id
        else container.profile_service.get_active(user_id)
    )
    return record.to_health_profile() if record else HealthProfile()
