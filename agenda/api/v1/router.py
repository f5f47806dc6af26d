"""API router aggregating all v1 routes."""

from __future__ import annotations

from fastapi import APIRouter

from .messages import router as messages_router

router = APIRouter(prefix="/api/v1")

router.include_router(messages_router, tags=["messages"])
