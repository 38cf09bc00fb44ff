# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration: all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "volunteer-registry")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8010"))

    # "memory" keeps everything in process; "sql" persists through SQLAlchemy
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "memory").lower()
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", "sqlite:///./volunteer_registry.db"
    )

    CALLER_HEADER: str = os.getenv("CALLER_HEADER", "X-Caller-Principal")
    ANONYMOUS_PRINCIPAL: str = os.getenv("ANONYMOUS_PRINCIPAL", "2vxsx-fae")

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    SEED_DEMO_GROUPS: bool = (
        os.getenv("SEED_DEMO_GROUPS", "false").lower() == "true"
    )


settings = Settings()
