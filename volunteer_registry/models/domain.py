# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.

Both models are frozen: a group is never edited in place, every change
builds a new instance which is then written back to all stores.
"""

from pydantic import BaseModel, ConfigDict, Field


class Member(BaseModel):
    """A volunteer on a group's roster."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Volunteer name")
    location: str = Field(..., description="Where the volunteer is based")
    specialist: str = Field(..., description="Service the volunteer offers")
    registration_id: str = Field(
        ..., description="Caller principal captured when the member joined"
    )

    def matches(self, name: str, registration_id: str) -> bool:
        return self.name == name and self.registration_id == registration_id


class Group(BaseModel):
    """An organization offering one volunteer service."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    country: str
    contact_number: str
    official_email: str
    service: str
    created_at: int = Field(..., description="Nanoseconds since the Unix epoch")
    members: tuple[Member, ...] = ()

    def has_member(self, name: str, registration_id: str) -> bool:
        return any(m.matches(name, registration_id) for m in self.members)

    def with_member(self, member: Member) -> "Group":
        return self.model_copy(update={"members": self.members + (member,)})

    def without_member(self, name: str) -> "Group":
        return self.model_copy(
            update={"members": tuple(m for m in self.members if m.name != name)}
        )
