"""Pydantic V2 response schemas for the Gatehouse API."""

from __future__ import annotations

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Static greeting returned by the root route."""

    message: str
