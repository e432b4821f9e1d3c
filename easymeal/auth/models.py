from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..preferences.models import DietaryRestriction


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)


class ProfileOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    name: str
    dietary_restrictions: list[str] = Field(
        default_factory=list, alias="dietaryRestrictions"
    )


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    dietary_restrictions: list[DietaryRestriction] | None = Field(
        default=None, alias="dietaryRestrictions"
    )

    @model_validator(mode="after")
    def at_least_one_field(self) -> ProfileUpdate:
        if self.name is None and self.dietary_restrictions is None:
            raise ValueError("At least one field is required")
        return self
