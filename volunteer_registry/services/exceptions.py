# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Registry errors: the closed set of ways an operation can be rejected.

Every error is raised before any store is touched and is turned into a
typed JSON response at the HTTP boundary.
"""


class RegistryError(Exception):
    """Base exception for all registry rejections."""

    kind: str = "RegistryError"
    status_code: int = 400
    default_message: str = "Registry operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "detail": self.message}


class MissingCredentials(RegistryError):
    """A required payload field is empty or absent."""

    kind = "MissingCredentials"
    status_code = 400
    default_message = "Some credentials are missing"


class FailedToRegisterGroup(RegistryError):
    """Reserved for storage-level registration failures; not raised today."""

    kind = "FailedToRegisterGroup"
    status_code = 500
    default_message = "Failed to register group"


class GroupAlreadyRegistered(RegistryError):
    kind = "GroupAlreadyRegistered"
    status_code = 409
    default_message = "Group already exists"


class GroupNotAvailable(RegistryError):
    kind = "GroupNotAvailable"
    status_code = 404
    default_message = "Group is not available"


class ServicesNotAvailable(RegistryError):
    """No registered group offers the requested service."""

    kind = "ServicesNotAvailable"
    status_code = 422
    default_message = "Service is not available"


class NotAMember(RegistryError):
    kind = "NotAMember"
    status_code = 403
    default_message = "You are not a member of this group"


ERROR_KINDS: tuple[type[RegistryError], ...] = (
    MissingCredentials,
    FailedToRegisterGroup,
    GroupAlreadyRegistered,
    GroupNotAvailable,
    ServicesNotAvailable,
    NotAMember,
)
