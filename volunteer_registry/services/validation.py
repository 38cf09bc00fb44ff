# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Validation: stateless payload checks run before any store is read or written.
"""

from typing import Any

from volunteer_registry.services.exceptions import MissingCredentials


def is_blank(value: Any) -> bool:
    """True for None, empty strings and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_fields(**fields: Any) -> list[str]:
    return [name for name, value in fields.items() if is_blank(value)]


def require_fields(message: str, **fields: Any) -> None:
    """Raise MissingCredentials naming every blank field."""
    missing = missing_fields(**fields)
    if missing:
        raise MissingCredentials(f"{message}: {', '.join(missing)}")


def validate_group_payload(
    name: str, country: str, contact_number: str, official_email: str, service: str
) -> None:
    require_fields(
        "Some credentials are missing",
        name=name,
        country=country,
        contact_number=contact_number,
        official_email=official_email,
        service=service,
    )


def validate_member_payload(
    name: str, location: str, specialist: str, group_name: str
) -> None:
    require_fields(
        "Some member credentials are missing",
        name=name,
        location=location,
        specialist=specialist,
        group_name=group_name,
    )


def validate_leave_payload(name: str, registration_id: str, group_name: str) -> None:
    require_fields(
        "Some credentials are missing",
        name=name,
        registration_id=registration_id,
        group_name=group_name,
    )
