"""Request authentication dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from label_score.containers import AppContainer


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def current_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the caller's user id from the X-User-Id header."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id"
        )
    try:
        return UUID(x_user_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-User-Id"
        ) from exc


async def optional_user_id(x_user_id: str | None = Header(default=None)) -> UUID | None:
    """Return the caller's user id when the header is present."""
    if not x_user_id:
        return None
    return await current_user_id(x_user_id)
