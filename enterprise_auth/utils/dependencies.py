"""
FastAPI Dependencies
Auth service wiring, session tokens and the session gate
"""

from fastapi import Depends, HTTPException, status, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional, Annotated, Dict
import logging

from enterprise_auth.models.user import ErrorCode
from enterprise_auth.services.auth_service import AuthService, get_auth_service

logger = logging.getLogger(__name__)

# Bearer access token; optional so that logout works without a session
security = HTTPBearer(auto_error=False)


def get_service() -> AuthService:
    """Auth service dependency"""
    return get_auth_service()


async def get_session_tokens(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_refresh_token: Optional[str] = Header(None)
) -> Dict[str, Optional[str]]:
    """
    Session tokens sent by the caller

    Args:
        credentials: Authorization header with Bearer access token
        x_refresh_token: X-Refresh-Token header

    Returns:
        dict: access_token and refresh_token, either may be None
    """
    return {
        'access_token': credentials.credentials if credentials else None,
        'refresh_token': x_refresh_token
    }


async def get_current_user(
    tokens: Dict[str, Optional[str]] = Depends(get_session_tokens),
    auth_service: AuthService = Depends(get_service)
) -> dict:
    """
    Get the signed-in user for a protected route

    Raises:
        HTTPException: 401 if there is no valid session
    """
    result = await auth_service.get_session_user(tokens['access_token'])

    if result['success']:
        return result['user']

    if result.get('error_code') == ErrorCode.UNAUTHENTICATED.value:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result['error'],
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.error(f"Session gate failed: {result.get('error')}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Authentication failed"
    )


# Type aliases for cleaner dependency injection
AuthServiceDep = Annotated[AuthService, Depends(get_service)]
SessionTokens = Annotated[Dict[str, Optional[str]], Depends(get_session_tokens)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
