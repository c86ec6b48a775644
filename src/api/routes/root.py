"""Root route."""

from __future__ import annotations

from fastapi import APIRouter

from src.api.models.schemas import MessageResponse

router = APIRouter(tags=["root"])


@router.get("/", response_model=MessageResponse)
async def hello_world() -> MessageResponse:
    return MessageResponse(message="Hello World")
