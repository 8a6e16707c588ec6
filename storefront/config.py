"""
Configuration management for the storefront.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Commerce backend (Store API)
    COMMERCE_BACKEND_URL = os.getenv('COMMERCE_BACKEND_URL', 'http://localhost:9000')
    COMMERCE_PUBLISHABLE_KEY = os.getenv('COMMERCE_PUBLISHABLE_KEY', '')
    COMMERCE_REQUEST_TIMEOUT = float(os.getenv('COMMERCE_REQUEST_TIMEOUT', '30'))
    DEFAULT_REGION_ID = os.getenv('DEFAULT_REGION_ID')

    # Customer session
    AUTH_COOKIE_NAME = os.getenv('AUTH_COOKIE_NAME', '_storefront_jwt')

    # Concurrent point config lookups per view
    POINT_CONFIG_MAX_WORKERS = int(os.getenv('POINT_CONFIG_MAX_WORKERS', '8'))

    # Caching (seconds); entries are also dropped when their tag is invalidated
    REDIS_URL = os.getenv('REDIS_URL')
    CACHE_DEFAULT_TIMEOUT = 300
    COINS_CACHE_TIMEOUT = int(os.getenv('COINS_CACHE_TIMEOUT', '300'))
    CART_CACHE_TIMEOUT = int(os.getenv('CART_CACHE_TIMEOUT', '300'))


class DevelopmentConfig(BaseConfig):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(BaseConfig):
    """Production configuration."""
    DEBUG = False

    # Override SECRET_KEY for production - must be set via environment
    _secret_key = os.getenv('SECRET_KEY', '')

    @classmethod
    def validate_secret_key(cls) -> str:
        """
        Validate SECRET_KEY in production environment.

        Raises:
            RuntimeError: If SECRET_KEY is missing, empty, or contains unsafe values
        """
        if not cls._secret_key:
            raise RuntimeError(
                "CRITICAL: SECRET_KEY environment variable is not set!\n"
                "Production deployments MUST have a secure SECRET_KEY.\n"
                "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
            )

        insecure_patterns = ['dev', 'change', 'default', 'test', 'secret', 'password']
        lower_key = cls._secret_key.lower()
        for pattern in insecure_patterns:
            if pattern in lower_key:
                raise RuntimeError(
                    f"CRITICAL: SECRET_KEY contains '{pattern}' which suggests it's not secure!\n"
                    "Production deployments require a unique, random SECRET_KEY."
                )

        if len(cls._secret_key) < 32:
            raise RuntimeError(
                "CRITICAL: SECRET_KEY is too short (minimum 32 characters required)!"
            )

        return cls._secret_key

    SECRET_KEY = _secret_key  # Will be validated at app startup


class TestingConfig(BaseConfig):
    """Testing configuration."""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    COMMERCE_BACKEND_URL = 'http://commerce.test'
    COMMERCE_PUBLISHABLE_KEY = 'pk_test'
    REDIS_URL = None
    POINT_CONFIG_MAX_WORKERS = 4


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config(config_name: str = 'development'):
    """Get configuration class by name."""
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Validate configuration before app startup.

    In production, this ensures SECRET_KEY is properly configured.

    Raises:
        RuntimeError: If validation fails in production
    """
    if config_name == 'production':
        ProductionConfig.validate_secret_key()
