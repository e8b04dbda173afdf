from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class Subscription(BaseModel):
    recipient: str
    city: str


class DigestSendRequest(BaseModel):
    recipient: str = Field(..., min_length=3, max_length=320)
    city: str = Field(..., min_length=1, max_length=128)

    @field_validator("recipient")
    @classmethod
    def _single_address(cls, v: str) -> str:
        v = v.strip()
        if "\r" in v or "\n" in v:
            raise ValueError("recipient may not contain line breaks")
        if "@" not in v:
            raise ValueError("recipient must be an email address")
        return v


class DigestSendResponse(BaseModel):
    recipient: str
    city: str
    sent: bool


class DigestReport(BaseModel):
    sent: int = 0
    skipped: int = 0
    failed: int = 0
