"""Configuration objects for the Sagas Health storefront."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Type

basedir = Path(__file__).resolve().parent


class Config:
    """Base configuration shared by all environments."""

    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-session-key")
    SQLALCHEMY_DATABASE_URI: str = os.getenv("DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "dev-secret-key")
    BCRYPT_LOG_ROUNDS: int = int(os.getenv("BCRYPT_LOG_ROUNDS", "13"))
    STRIPE_SECRET_KEY: str = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_PUBLISHABLE_KEY: str = os.getenv(
        "STRIPE_PUBLISHABLE_KEY", "pk_test_your_publishable_key_here"
    )
    STRIPE_API_BASE: str = os.getenv("STRIPE_API_BASE", "https://api.stripe.com/v1")
    STRIPE_TIMEOUT_SECONDS: int = int(os.getenv("STRIPE_TIMEOUT_SECONDS", "30"))
    PAYMENT_CURRENCY: str = os.getenv("PAYMENT_CURRENCY", "usd")
    GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    LMN_GENERATION_DELAY_SECONDS: float = float(os.getenv("LMN_GENERATION_DELAY_SECONDS", "3"))
    SESSION_ITEM_MAX_AGE_HOURS: int = int(os.getenv("SESSION_ITEM_MAX_AGE_HOURS", "24"))

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Expose configuration values for debugging and introspection."""

        return {key: getattr(cls, key) for key in dir(cls) if key.isupper()}


class DevelopmentConfig(Config):
    """Configuration suitable for local development."""

    _db_path = basedir / "dev.db"
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URL", f"sqlite:///{_db_path}")
    DEBUG = True


class ProductionConfig(Config):
    """Configuration tailored for production deployments."""

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///sagas_health.db")
    SESSION_COOKIE_SECURE = True
    DEBUG = False


class TestingConfig(Config):
    """Configuration used by the automated test suite."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-session-key"
    JWT_SECRET_KEY = "test-secret-key"
    BCRYPT_LOG_ROUNDS = 4
    STRIPE_SECRET_KEY = "sk_test_storefront"
    GOOGLE_MAPS_API_KEY = ""
    LMN_GENERATION_DELAY_SECONDS = 0.0
    DEBUG = False


CONFIG_MAP: Dict[str, Type[Config]] = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(name: str | None) -> Type[Config]:
    """Retrieve the configuration class matching the supplied name."""

    if not name:
        return DevelopmentConfig
    return CONFIG_MAP.get(name.lower(), DevelopmentConfig)
