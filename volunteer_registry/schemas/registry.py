# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas: API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.

Request fields default to "" so a missing field reaches the validation
layer and is reported as MissingCredentials rather than a bare 422.
"""

from typing import Optional

from pydantic import BaseModel, Field

from volunteer_registry.models.domain import Group


# ── Group Schemas ──

class GroupRegisterRequest(BaseModel):
    name: str = Field(default="", max_length=255, description="Unique group name")
    country: str = Field(default="", max_length=255)
    contact_number: str = Field(default="", max_length=64)
    official_email: str = Field(default="", max_length=255)
    service: str = Field(default="", max_length=255, description="Advertised service")


class MemberResponse(BaseModel):
    name: str
    location: str
    specialist: str
    registration_id: str


class GroupResponse(BaseModel):
    id: int
    name: str
    country: str
    contact_number: str
    official_email: str
    service: str
    created_at: int
    members: list[MemberResponse]

    @classmethod
    def from_domain(cls, group: Group) -> "GroupResponse":
        return cls(**group.model_dump())


# ── Membership Schemas ──

class VolunteerRequest(BaseModel):
    name: str = Field(default="", max_length=255)
    location: str = Field(default="", max_length=255)
    specialist: str = Field(default="", max_length=255)
    group_name: str = Field(default="", max_length=255)


class LeaveGroupRequest(BaseModel):
    name: str = Field(default="", max_length=255)
    registration_id: str = Field(default="", max_length=255)
    group_name: str = Field(default="", max_length=255)


# ── Generic ──

class MessageResponse(BaseModel):
    status: str = "ok"
    message: str


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None


class StatsResponse(BaseModel):
    total_groups: int
    total_members: int
    total_services: int
    total_locations: int
    groups_per_service: dict[str, int]
