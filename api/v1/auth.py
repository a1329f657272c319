# api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, status

from services.auth import create_token
from api.v1.schemas import TokenRequest, TokenOut

router = APIRouter()


@router.post(
    "/token",
    response_model=TokenOut,
    status_code=status.HTTP_200_OK,
    summary="Issue a session token for a user id (demo login)",
)
async def issue_token(body: TokenRequest) -> TokenOut:
    return TokenOut(access_token=create_token(body.user_id))
