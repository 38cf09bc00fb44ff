# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Membership endpoints, volunteer (join) and leave.
The joining member's registration id is the caller principal supplied by
the hosting environment, never a payload field.
"""

from fastapi import APIRouter, Depends

from volunteer_registry.core.dependencies import get_caller_identity, get_registry_service
from volunteer_registry.schemas.registry import (
    LeaveGroupRequest,
    MessageResponse,
    VolunteerRequest,
)
from volunteer_registry.services.registry_service import RegistryService

router = APIRouter(prefix="/api/v1", tags=["Members"])


@router.post("/members/join", response_model=MessageResponse)
def volunteer(
    payload: VolunteerRequest,
    caller: str = Depends(get_caller_identity),
    registry: RegistryService = Depends(get_registry_service),
):
    """Join a group as a volunteer."""
    message = registry.volunteer(
        name=payload.name,
        location=payload.location,
        specialist=payload.specialist,
        group_name=payload.group_name,
        caller=caller,
    )
    return MessageResponse(message=message)


@router.post("/members/leave", response_model=MessageResponse)
def leave_group(
    payload: LeaveGroupRequest,
    registry: RegistryService = Depends(get_registry_service),
):
    """Leave a group; name and registration id must match a member."""
    message = registry.leave_group(
        name=payload.name,
        registration_id=payload.registration_id,
        group_name=payload.group_name,
    )
    return MessageResponse(message=message)
