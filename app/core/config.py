# ===================================
# app/core/config.py
# ===================================
"""
Configuration centralisée de l'application avec Pydantic Settings.
Gère toutes les variables d'environnement et leur validation.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "development_jwt_secret_key_not_for_production_use_12345678"


class Settings(BaseSettings):
    """Configuration principale de l'application."""

    # Application
    app_name: str = Field(default="Safety Store API", description="Nom de l'application")
    app_version: str = Field(default="1.0.0", description="Version de l'application")
    debug: bool = Field(default=False, description="Mode debug")
    environment: str = Field(default="development", description="Environnement (dev/staging/prod)")

    # API
    api_prefix: str = Field(default="/api/v1", description="Préfixe de l'API")

    # Base de données
    database_url: str = Field(
        default="sqlite:///./safety_store.db",
        description="URL SQLAlchemy (postgresql+psycopg://... en production)"
    )

    # JWT (les tokens sont émis par le service d'authentification)
    jwt_secret_key: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="Clé secrète partagée pour vérifier les JWT"
    )
    jwt_algorithm: str = Field(default="HS256", description="Algorithme JWT")
    jwt_access_token_expire_minutes: int = Field(
        default=60, description="Durée de vie access token (minutes)"
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Origins autorisés pour CORS"
    )
    cors_allow_credentials: bool = Field(default=True, description="Autoriser credentials CORS")

    # Boutique
    currency: str = Field(default="KES", description="Devise par défaut")
    country: str = Field(default="Kenya", description="Pays de la boutique")

    # Scheduler
    scheduler_enabled: bool = Field(default=False, description="Activer APScheduler")
    coupon_expiry_hour: int = Field(
        default=1, ge=0, le=23, description="Heure (UTC) de désactivation des coupons expirés"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Niveau de log")
    log_format: str = Field(default="json", description="Format de log (json/text)")
    log_dir: str = Field(default="logs", description="Répertoire des fichiers de log")
    log_to_file: bool = Field(default=False, description="Écrire les logs dans log_dir")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @validator("environment")
    def validate_environment(cls, v):
        """Valide que l'environnement est correct."""
        allowed_envs = ["development", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of {allowed_envs}")
        return v

    @validator("log_level")
    def validate_log_level(cls, v):
        """Valide le niveau de log."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}")
        return v.upper()

    @validator("log_format")
    def validate_log_format(cls, v):
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @validator("jwt_secret_key")
    def validate_jwt_secret(cls, v, values):
        """Refuse le secret de développement en production."""
        if values.get("environment") == "production" and v == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set in production")
        return v

    @property
    def is_production(self) -> bool:
        """Retourne True si on est en production."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Retourne True si on est en développement."""
        return self.environment == "development"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Retourne l'instance des settings avec cache.
    Le cache évite de recharger les variables d'environnement à chaque appel.
    """
    return Settings()


# Raccourci pour accéder aux settings
settings = get_settings()
