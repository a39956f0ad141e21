"""
Health Routes
"""

from fastapi import APIRouter, HTTPException, status
import logging

from enterprise_auth.utils.config import get_app_config
from enterprise_auth.utils.dependencies import AuthServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Service health check"""
    config = get_app_config()
    return {
        "status": "healthy",
        "service": config.service_name,
        "version": config.service_version
    }


@router.get("/health/identity")
async def identity_health_check(auth_service: AuthServiceDep):
    """Identity provider configuration check"""
    identity = auth_service.identity
    if not identity.is_available() or not identity.is_admin_available():
        logger.error("Identity provider health check failed: Supabase not fully configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity provider not configured"
        )
    return {
        "status": "healthy",
        "identity_provider": "configured",
        "elevated_access": "configured"
    }
