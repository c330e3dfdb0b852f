"""Ways an operator can identify a registration at the door."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ByRegistrationId:
    registration_id: str


@dataclass(frozen=True)
class ByCode:
    """The opaque per-registration code, usually scanned from a QR image."""

    code: str


@dataclass(frozen=True)
class ByEmail:
    """Subject email plus event; resolves to the unattended registration nearest in time."""

    email: str
    event_id: str


RegistrationLookup = ByRegistrationId | ByCode | ByEmail
