"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


MEMORY_DATABASE = ":memory:"
DEFAULT_ADMIN_PASSWORD = "dev-admin-password-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment."""
    
    # ==========================================================================
    # Environment
    # ==========================================================================
    
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    
    # ==========================================================================
    # API Server
    # ==========================================================================
    
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    
    # ==========================================================================
    # Database
    # ==========================================================================
    
    # File path, or ":memory:" for a throwaway database
    database_path: str = "./data/rhyzome.db"
    
    # ==========================================================================
    # Tokens
    # ==========================================================================
    
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    token_bytes: int = 32
    
    # ==========================================================================
    # Optional Services
    # ==========================================================================
    
    sentry_dsn: str = ""
    
    # ==========================================================================
    # Helpers
    # ==========================================================================
    
    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
    
    @property
    def is_production(self) -> bool:
        return self.environment == "production"
    
    @property
    def uses_memory_database(self) -> bool:
        return self.database_path == MEMORY_DATABASE
    
    class Config:
        env_prefix = "RHYZOME_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
