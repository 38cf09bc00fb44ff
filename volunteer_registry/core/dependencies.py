# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire the store, the service and the caller.
"""

from fastapi import Request

from volunteer_registry.core.config import settings
from volunteer_registry.core.database import build_engine
from volunteer_registry.repositories.registry_store import InMemoryRegistryStore
from volunteer_registry.repositories.sql_store import SqlRegistryStore
from volunteer_registry.services.registry_service import RegistryService


def build_store(backend: str = settings.STORAGE_BACKEND, url: str = settings.DATABASE_URL):
    """Pick the storage backend named by configuration."""
    if backend == "sql":
        return SqlRegistryStore(build_engine(url))
    if backend != "memory":
        raise ValueError(f"Unknown STORAGE_BACKEND '{backend}' (expected 'memory' or 'sql')")
    return InMemoryRegistryStore()


# ── Singleton instances ──
_store = build_store()
_registry_service = RegistryService(store=_store)


# ── FastAPI dependency functions ──
def get_registry_service() -> RegistryService:
    return _registry_service


def get_registry_store():
    return _store


def get_caller_identity(request: Request) -> str:
    """
    Principal of the caller, already verified by the hosting environment.
    Unauthenticated callers get the anonymous principal.
    """
    caller = request.headers.get(settings.CALLER_HEADER, "").strip()
    return caller or settings.ANONYMOUS_PRINCIPAL
