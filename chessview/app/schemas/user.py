"""
User Pydantic schemas for request/response validation
"""
from typing import Optional

from pydantic import BaseModel, Field


class UserRegister(BaseModel):
    """Schema for user registration"""
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserLogin(BaseModel):
    """Schema for user login"""
    email: str
    password: str


class GoogleAuth(BaseModel):
    """Schema for Google sign-in: the Google ID token from the client SDK, verified server-side"""
    id_token: str = Field(min_length=1, alias="idToken")

    class Config:
        populate_by_name = True


class UserResponse(BaseModel):
    """Schema for user response (never includes the password hash)"""
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    google_id: Optional[str] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Schema for token response"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    message: Optional[str] = None
