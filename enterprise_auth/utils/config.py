"""
Configuration Management
Environment-based configuration for Supabase, provisioning policy and logging
"""

from typing import Optional, Set
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import logging

from enterprise_auth.models.user import AccountStatus, Role

logger = logging.getLogger(__name__)


class AppConfig(BaseSettings):
    """Application Configuration"""

    # Service info
    service_name: str = "enterprise-auth"
    service_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_key: str = ""

    # Public base URL used to build the password reset redirect
    site_url: str = "http://localhost:3000"

    # Provisioning policy
    admin_emails: str = ""
    initial_account_status: str = AccountStatus.APPROVED.value
    default_role: str = Role.STUDENT_L1.value
    min_password_length: int = 6

    # Logging
    log_level: str = "INFO"
    log_format: str = "default"
    logging_config_path: Optional[str] = None

    # CORS
    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator('initial_account_status')
    @classmethod
    def validate_initial_account_status(cls, v):
        allowed = {status.value for status in AccountStatus}
        if v not in allowed:
            raise ValueError(f"initial_account_status must be one of {sorted(allowed)}")
        return v

    @field_validator('min_password_length')
    @classmethod
    def validate_min_password_length(cls, v):
        if v < 1:
            raise ValueError('min_password_length must be at least 1')
        return v

    @property
    def admin_email_set(self) -> Set[str]:
        """Lower-cased administrator allow-list"""
        return {
            email.strip().lower()
            for email in self.admin_emails.split(",")
            if email.strip()
        }

    @property
    def password_reset_redirect_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/auth/reset-password"

    def log_config(self):
        """Log configuration (without sensitive data)"""
        logger.info(f"Environment: {self.environment}")
        logger.info(f"Supabase URL: {self.supabase_url or '(not set)'}")
        logger.info(f"Anon key: {'Yes' if self.supabase_anon_key else 'No'}")
        logger.info(f"Service key: {'Yes' if self.supabase_service_key else 'No'}")
        logger.info(f"Reset redirect: {self.password_reset_redirect_url}")
        logger.info(f"Admin allow-list size: {len(self.admin_email_set)}")
        logger.info(f"Initial account status: {self.initial_account_status}")


_app_config: Optional[AppConfig] = None


def get_app_config() -> AppConfig:
    """Get application configuration instance"""
    global _app_config
    if _app_config is None:
        _app_config = AppConfig()
    return _app_config


def validate_configuration():
    """Validate configuration settings at startup"""
    try:
        config = get_app_config()
        config.log_config()

        if not config.supabase_url or not config.supabase_anon_key:
            logger.warning("Supabase credentials not found in environment")
        if not config.supabase_service_key:
            logger.warning("SUPABASE_SERVICE_KEY not set - login and registration will report SERVER_ERROR")

        logger.info("Configuration validation completed")
        return True

    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise
