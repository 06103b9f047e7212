from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DirectoryUserSchema(BaseModel):
    user_name: str = Field(alias="userName", min_length=1)
    email: str | None = None
    is_online: bool | None = Field(default=None, alias="isOnline")
    id: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> str | None:
        return None if value is None else str(value)


class ProviderTokenResponse(BaseModel):
    token: str = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")
