from __future__ import annotations

from pydantic import Field

from core.models.dish import WireModel


class TokenRequest(WireModel):
    user_id: str = Field(..., min_length=1)


class TokenOut(WireModel):
    access_token: str
    token_type: str = "bearer"
