"""
Enterprise Auth Service - FastAPI Application
Login, registration and password recovery for the enterprise management product
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager

from enterprise_auth.routes import auth, health
from enterprise_auth.utils.config import get_app_config, validate_configuration
from enterprise_auth.utils.logger import init_logging
from enterprise_auth.services.auth_service import get_auth_service

config = get_app_config()

# Configure logging
init_logging(config)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    logger.info("Enterprise Auth Service starting up...")

    validate_configuration()

    # Build the Supabase clients before the first request
    get_auth_service()

    logger.info("Enterprise Auth Service startup complete")

    yield

    # Shutdown
    logger.info("Enterprise Auth Service shutting down...")


# Create FastAPI application
app = FastAPI(
    title="Enterprise Auth Service",
    description="Account provisioning and login authorization on Supabase",
    version=config.service_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "message": exc.detail,
            "status_code": exc.status_code
        },
        headers=getattr(exc, "headers", None)
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Enterprise Auth Service",
        "version": config.service_version,
        "description": "Account provisioning and login authorization",
        "docs": "/docs"
    }
