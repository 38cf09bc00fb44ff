# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Group registration and lookup endpoints.
Thin HTTP layer, delegates ALL logic to RegistryService.
Registry errors propagate to the app-level handler in main.py.
"""

from fastapi import APIRouter, Depends

from volunteer_registry.core.dependencies import get_registry_service
from volunteer_registry.schemas.registry import (
    GroupRegisterRequest,
    GroupResponse,
    MessageResponse,
)
from volunteer_registry.services.registry_service import RegistryService

router = APIRouter(prefix="/api/v1", tags=["Groups"])


@router.post("/groups", status_code=201, response_model=MessageResponse)
def register_group(
    payload: GroupRegisterRequest,
    registry: RegistryService = Depends(get_registry_service),
):
    """Register a new volunteer group."""
    message = registry.register_group(
        name=payload.name,
        country=payload.country,
        contact_number=payload.contact_number,
        official_email=payload.official_email,
        service=payload.service,
    )
    return MessageResponse(message=message)


@router.get("/groups", response_model=list[GroupResponse])
def list_groups(registry: RegistryService = Depends(get_registry_service)):
    """List every registered group."""
    return [GroupResponse.from_domain(g) for g in registry.list_groups()]


@router.get("/groups/by-name", response_model=GroupResponse)
def get_group_by_name(
    name: str = "",
    registry: RegistryService = Depends(get_registry_service),
):
    return GroupResponse.from_domain(registry.get_group_by_name(name))


@router.get("/groups/by-service", response_model=GroupResponse)
def get_group_by_service(
    service: str = "",
    registry: RegistryService = Depends(get_registry_service),
):
    """The group most recently registered or updated under a service."""
    return GroupResponse.from_domain(registry.get_group_by_service(service))


@router.get("/groups/by-location", response_model=GroupResponse)
def get_group_by_location(
    location: str = "",
    registry: RegistryService = Depends(get_registry_service),
):
    """The group most recently registered or updated in a country."""
    return GroupResponse.from_domain(registry.get_group_by_location(location))
