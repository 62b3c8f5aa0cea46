from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chatcore.security.sanitizer import InputSanitizer


class GroupCreateRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')

    name: str = Field(..., min_length=1, max_length=100)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return InputSanitizer.sanitize_name(v)


class GroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_by: str
    created_at: datetime


class MembershipOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_id: str
    user_id: str
    joined_at: datetime
    left_at: datetime | None = None


class GroupDeleteResponse(BaseModel):
    model_config = ConfigDict(extra='forbid')
    status: str
