# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Service and location catalogs, plus registry stats.
"""

from fastapi import APIRouter, Depends

from volunteer_registry.core.dependencies import get_registry_service
from volunteer_registry.schemas.registry import GroupResponse, StatsResponse
from volunteer_registry.services.registry_service import RegistryService

router = APIRouter(prefix="/api/v1", tags=["Catalog"])


@router.get("/services", response_model=list[str])
def list_services(registry: RegistryService = Depends(get_registry_service)):
    """Every service currently offered by at least one group."""
    return registry.list_services()


@router.get("/services/{service}/groups", response_model=list[GroupResponse])
def list_groups_for_service(
    service: str,
    registry: RegistryService = Depends(get_registry_service),
):
    return [GroupResponse.from_domain(g) for g in registry.get_groups_by_service(service)]


@router.get("/locations", response_model=list[str])
def list_locations(registry: RegistryService = Depends(get_registry_service)):
    """Every country with at least one registered group."""
    return registry.list_locations()


@router.get("/locations/{location}/groups", response_model=list[GroupResponse])
def list_groups_for_location(
    location: str,
    registry: RegistryService = Depends(get_registry_service),
):
    return [GroupResponse.from_domain(g) for g in registry.get_groups_by_location(location)]


@router.get("/stats", response_model=StatsResponse)
def get_stats(registry: RegistryService = Depends(get_registry_service)):
    """Aggregated registry statistics."""
    return registry.get_stats()
