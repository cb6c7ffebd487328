"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from cyclesense.config import Settings, get_settings


async def get_current_user_id(request: Request) -> str:
    """Return the user id placed on ``request.state`` by upstream auth.

    Authentication itself happens outside this service.
    """
    user_id: str | None = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return str(user_id)


async def get_optional_user_id(request: Request) -> str | None:
    user_id = getattr(request.state, "user_id", None)
    return str(user_id) if user_id else None


# Annotated shortcuts for route signatures
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
OptionalUserId = Annotated[str | None, Depends(get_optional_user_id)]
AppSettings = Annotated[Settings, Depends(get_settings)]
