from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .records import as_bool, as_text, pick


class UserCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    role: str
    email: str
    name: str
    password: str = Field(repr=False)
    caregiver_email: str | None = None
    is_paid: bool = False

    @field_validator("caregiver_email", mode="before")
    @classmethod
    def default_caregiver(cls, value):
        return value or None

    @field_validator("is_paid", mode="before")
    @classmethod
    def default_is_paid(cls, value):
        return as_bool(value) if value is not None else False

    def to_payload(self, password_hash: str) -> dict:
        payload = self.model_dump(by_alias=True, exclude={"password"})
        payload["passwordHash"] = password_hash
        return payload


class UserOut(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    name: str | None = None
    role: str | None = None
    caregiver_email: str | None = None
    is_paid: bool = False

    @model_validator(mode="before")
    @classmethod
    def from_backend_row(cls, raw: Any):
        if not isinstance(raw, Mapping):
            return raw
        return {
            "email": as_text(pick(raw, "Email", "email")),
            "name": as_text(pick(raw, "Name", "name")),
            "role": as_text(pick(raw, "Role", "role")),
            "caregiver_email": as_text(pick(raw, "CaregiverEmail", "caregiverEmail", "caregiver_email")) or None,
            "is_paid": as_bool(pick(raw, "IsPaid", "isPaid", "is_paid", default=False)),
        }
