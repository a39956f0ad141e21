"""
Authentication Routes
Login, registration, password reset and logout
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from typing import Any, Dict
import logging

from enterprise_auth.models.user import ErrorCode
from enterprise_auth.schemas.user import (
    UserLoginSchema, UserRegisterSchema, UserPasswordResetSchema,
    UserPasswordUpdateSchema, AuthResultSchema
)
from enterprise_auth.utils.dependencies import AuthServiceDep, SessionTokens, CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter()

# HTTP status for each failure code
ERROR_STATUS = {
    ErrorCode.MISSING_FIELDS.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_EMAIL.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_PASSWORD.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PASSWORD_MISMATCH.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PASSWORD_TOO_SHORT.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CREDENTIALS.value: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.UNAUTHENTICATED.value: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.SESSION_REQUIRED.value: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.ACCOUNT_NOT_APPROVED.value: status.HTTP_403_FORBIDDEN,
    ErrorCode.PROFILE_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_EXISTS.value: status.HTTP_409_CONFLICT,
    ErrorCode.AUTH_CREATE_FAILED.value: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.PROFILE_CREATE_FAILED.value: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.MEMBERSHIP_CREATE_FAILED.value: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.RESET_REQUEST_FAILED.value: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.UPDATE_FAILED.value: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.SERVER_ERROR.value: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.UNKNOWN_ERROR.value: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def result_response(result: Dict[str, Any], success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Render an operation result with the HTTP status of its outcome"""
    if result.get('success'):
        status_code = success_status
    else:
        status_code = ERROR_STATUS.get(result.get('error_code'), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=status_code, content=result)


@router.post("/login", response_model=AuthResultSchema)
async def login(login_data: UserLoginSchema, auth_service: AuthServiceDep):
    """
    User login

    Authenticates with Supabase, checks profile and approval status
    and returns the user payload with session tokens
    """
    result = await auth_service.login(login_data.email, login_data.password)
    if result['success']:
        logger.info(f"User logged in successfully: {login_data.email}")
    return result_response(result)


@router.post("/register", response_model=AuthResultSchema, status_code=status.HTTP_201_CREATED)
async def register(register_data: UserRegisterSchema, auth_service: AuthServiceDep):
    """
    Register new user

    Creates the auth user, profile and primary membership
    """
    result = await auth_service.register(
        register_data.email,
        register_data.password,
        register_data.name,
        register_data.org_id
    )
    if result['success']:
        logger.info(f"User registered successfully: {register_data.email}")
    return result_response(result, status.HTTP_201_CREATED)


@router.post("/password-reset", response_model=AuthResultSchema)
async def request_password_reset(reset_data: UserPasswordResetSchema, auth_service: AuthServiceDep):
    """Send a password reset link"""
    return result_response(await auth_service.request_password_reset(reset_data.email))


@router.post("/password-reset-complete", response_model=AuthResultSchema)
async def complete_password_reset(
    password_data: UserPasswordUpdateSchema,
    tokens: SessionTokens,
    auth_service: AuthServiceDep
):
    """
    Set a new password

    Requires the recovery session tokens from the reset link
    """
    result = await auth_service.update_password_with_token(
        password_data.new_password,
        password_data.confirm_password,
        tokens['access_token'],
        tokens['refresh_token']
    )
    return result_response(result)


@router.post("/logout", response_model=AuthResultSchema)
async def logout(tokens: SessionTokens, auth_service: AuthServiceDep):
    """Invalidate the current session"""
    result = await auth_service.logout(tokens['access_token'], tokens['refresh_token'])
    return result_response(result)


@router.get("/me", response_model=AuthResultSchema)
async def get_current_user_info(current_user: CurrentUser):
    """Get the signed-in user"""
    return {"success": True, "user": current_user}
