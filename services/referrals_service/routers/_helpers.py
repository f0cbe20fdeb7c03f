"""Shared helper functions for referrals service routers."""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from services.referrals_service.schemas import ReferralResponse


def to_referrals(rows: list[dict[str, Any]]) -> list[ReferralResponse]:
    return [ReferralResponse.model_validate(row) for row in rows]


def error_response(
    body: BaseModel, status_code: int = status.HTTP_400_BAD_REQUEST
) -> JSONResponse:
    """Return a view-model with a non-2xx status."""
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
