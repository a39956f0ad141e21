"""
User data schemas for Enterprise Auth

Pydantic models for auth request bodies and results.
Field presence and password rules are enforced by AuthService so that
callers receive coded results rather than validation errors. Every
request field is optional and accepts null for the same reason.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, field_validator


class _EmailSchema(BaseModel):
    """Base schema carrying an email"""
    email: Optional[str] = None

    @field_validator('email')
    @classmethod
    def strip_email(cls, v):
        """Trim surrounding whitespace"""
        return v.strip() if v else v


class UserLoginSchema(_EmailSchema):
    """Schema for user login"""
    password: Optional[str] = None


class UserRegisterSchema(_EmailSchema):
    """Schema for user registration"""
    password: Optional[str] = None
    name: Optional[str] = None
    org_id: Optional[str] = None


class UserPasswordResetSchema(_EmailSchema):
    """Schema for password reset request"""


class UserPasswordUpdateSchema(BaseModel):
    """Schema for setting a new password from a reset link"""
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None


class AuthResultSchema(BaseModel):
    """Schema for operation results"""
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    status: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    session: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")
