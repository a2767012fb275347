# (c) Copyright Datacraft, 2026
"""Authentication request and response schemas."""
from pydantic import BaseModel, EmailStr, Field

from craft.core.features.users.schema import User


class RegisterRequest(BaseModel):
	email: EmailStr
	password: str = Field(..., min_length=8, max_length=128)
	name: str = Field(..., min_length=2, max_length=50)


class LoginRequest(BaseModel):
	email: EmailStr
	password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
	current_password: str = Field(..., min_length=1)
	new_password: str = Field(..., min_length=8, max_length=128)


class TokenResponse(BaseModel):
	token: str
	token_type: str = "bearer"
	expires_in: int
	user: User


class TokenValidation(BaseModel):
	valid: bool
	user: User | None = None
