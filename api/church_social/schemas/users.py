"""User-related Pydantic schemas."""

from pydantic import BaseModel

from church_social.models.user import User


class UserMeResponse(BaseModel):
    """Response for GET /users/me endpoint."""

    user_id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    api_key_name: str | None

    @classmethod
    def from_model(cls, user: User, api_key_name: str | None = None) -> "UserMeResponse":
        return cls(
            user_id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            is_active=user.is_active,
            api_key_name=api_key_name,
        )
