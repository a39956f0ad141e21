"""
Request and response schemas for the auth API
"""

from .user import (
    UserLoginSchema, UserRegisterSchema, UserPasswordResetSchema,
    UserPasswordUpdateSchema, AuthResultSchema
)

__all__ = [
    "UserLoginSchema",
    "UserRegisterSchema",
    "UserPasswordResetSchema",
    "UserPasswordUpdateSchema",
    "AuthResultSchema",
]
