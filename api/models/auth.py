"""Authentication-related Pydantic models."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Request model for user registration."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)


class UserResponse(BaseModel):
    """Response model for user data."""

    id: str
    email: str
    name: str
    created_at: datetime


class AuthResponse(BaseModel):
    """Response model for authentication endpoints."""

    access_token: str
    token_type: str
    user: UserResponse


class LoginRequest(BaseModel):
    """Request model for login."""

    email: EmailStr
