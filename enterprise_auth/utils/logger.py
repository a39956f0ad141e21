"""
Logging utilities for Enterprise Auth

Provides centralized logging configuration and an audit logger for auth events.
"""

import os
import logging
import logging.config
import copy
from typing import Optional, Dict, Any
import yaml

# Default logging configuration
DEFAULT_LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
        'detailed': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(lineno)d - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
        'json': {
            'format': '{"timestamp": "%(asctime)s", "logger": "%(name)s", "level": "%(levelname)s", "module": "%(module)s", "function": "%(funcName)s", "line": %(lineno)d, "message": "%(message)s"}',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'default',
            'stream': 'ext://sys.stdout'
        }
    },
    'loggers': {
        'enterprise_auth': {
            'level': 'INFO',
            'handlers': ['console'],
            'propagate': False
        }
    },
    'root': {
        'level': 'INFO',
        'handlers': ['console']
    }
}


def load_logging_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a dictConfig mapping from a YAML file, or the default

    Args:
        config_path: Path to a YAML logging configuration

    Returns:
        dict: Logging configuration
    """
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
            if isinstance(config, dict):
                return config
            logging.getLogger(__name__).warning(f"Ignoring logging config {config_path}: not a mapping")
        except (OSError, yaml.YAMLError) as e:
            logging.getLogger(__name__).warning(f"Failed to load logging config from {config_path}: {e}")

    return copy.deepcopy(DEFAULT_LOGGING_CONFIG)


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    environment: Optional[str] = None
) -> Dict[str, Any]:
    """
    Setup logging configuration

    Args:
        config_path: Path to logging configuration file
        log_level: Override log level
        log_format: Override log format ('default', 'detailed', 'json')
        environment: Environment name whose section overrides handlers/loggers

    Returns:
        dict: The configuration that was applied
    """
    config = load_logging_config(config_path)

    # Apply environment-specific overrides
    environment = environment or os.getenv('ENVIRONMENT', 'development')
    env_config = config.pop(environment, None)
    if isinstance(env_config, dict):
        if 'handlers' in env_config:
            config.setdefault('handlers', {}).update(env_config['handlers'])
        if 'loggers' in env_config:
            config.setdefault('loggers', {}).update(env_config['loggers'])

    if log_level:
        log_level = log_level.upper()
        for logger_config in config.get('loggers', {}).values():
            logger_config['level'] = log_level
        for handler_config in config.get('handlers', {}).values():
            handler_config['level'] = log_level
        if 'root' in config:
            config['root']['level'] = log_level

    if log_format and log_format in config.get('formatters', {}):
        for handler_config in config.get('handlers', {}).values():
            handler_config['formatter'] = log_format

    try:
        logging.config.dictConfig(config)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        # Fallback to basic configuration
        logging.basicConfig(
            level=getattr(logging, log_level or 'INFO', logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        logging.getLogger(__name__).error(f"Failed to configure logging: {e}")

    return config


class AuditLogger:
    """Logger for authentication audit events"""

    def __init__(self, name: str = "enterprise_auth.audit"):
        self.logger = logging.getLogger(name)

    def log_auth_event(
        self,
        event: str,
        email: Optional[str] = None,
        user_id: Optional[str] = None,
        outcome: str = 'success',
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """Log an authentication event for the audit trail"""
        log_method = self.logger.info if outcome == 'success' else self.logger.warning
        log_method(
            f"Auth event {event} for {email or user_id or 'anonymous'}: {outcome}"
            + (f" ({error_code})" if error_code else ""),
            extra={
                'auth_event': event,
                'email': email,
                'user_id': user_id,
                'outcome': outcome,
                'error_code': error_code,
                'details': details or {},
                'event_type': 'auth_event'
            }
        )


def get_audit_logger() -> AuditLogger:
    """Get audit logger instance"""
    return AuditLogger()


def init_logging(config=None):
    """Initialize logging from application configuration"""
    if config is None:
        from enterprise_auth.utils.config import get_app_config
        config = get_app_config()

    return setup_logging(
        config.logging_config_path,
        config.log_level,
        config.log_format,
        config.environment
    )
