from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from forum.constants.roles import Role, normalize_role


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, description="Username must be between 3 and 30 characters.")
    email: EmailStr = Field(..., description="A valid email address.")
    password: str = Field(..., min_length=8, max_length=72, description="Password must be between 8 and 72 characters.")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role
    banned: bool = False
    created_at: datetime | None = None

    @field_validator("role", mode="before")
    @classmethod
    def canonical_role(cls, value):
        """Records written by older deployments may carry a legacy label."""
        return normalize_role(value) or value


class RoleUpdate(BaseModel):
    role: Role = Field(..., description="One of Player, GameMaster, Admin.")


class ThemeUpdate(BaseModel):
    theme: str = Field(..., pattern=r"^(light|dark|system)$")
