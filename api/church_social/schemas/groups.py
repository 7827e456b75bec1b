"""Group-related Pydantic schemas."""

from pydantic import BaseModel, field_validator

from church_social.models.group import Group


class CreateGroupRequest(BaseModel):
    """Request to create a small group."""

    name: str
    description: str = ""
    requires_approval: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Group name is required")
        if len(v) > 100:
            raise ValueError("Group name must be 100 characters or less")
        return v


class GroupResponse(BaseModel):
    """Group as returned by the API."""

    id: str
    name: str
    description: str
    leader_id: str
    requires_approval: bool
    created_at: str

    @classmethod
    def from_model(cls, group: Group) -> "GroupResponse":
        return cls(
            id=str(group.id),
            name=group.name,
            description=group.description,
            leader_id=str(group.leader_id),
            requires_approval=group.requires_approval,
            created_at=group.created_at.isoformat(),
        )


class JoinGroupRequest(BaseModel):
    """Optional note sent with a join request."""

    message: str | None = None


class JoinGroupResponse(BaseModel):
    """Outcome of a join attempt: ``joined`` or ``pending``."""

    group_id: str
    status: str
