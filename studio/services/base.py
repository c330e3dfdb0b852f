"""Helpers shared by the services."""

from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

from django.utils import timezone

from studio.domain.errors import InvalidIdError

Clock = Callable[[], datetime]

IdT = TypeVar("IdT")


def parse_id(id_type: type[IdT], value: object, entity: str) -> IdT:
    """Coerce a raw identifier into its typed form.

    Raises:
        InvalidIdError: If the value is not a valid UUID.
    """
    if isinstance(value, id_type):
        return value
    try:
        return id_type.from_string(str(value))
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidIdError(entity) from exc


def default_clock() -> datetime:
    return timezone.now()
