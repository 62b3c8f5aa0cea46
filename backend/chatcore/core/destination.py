"""
Message addressing.

A message goes to exactly one group or exactly one peer. The two variants are
separate frozen dataclasses; consumers dispatch with ``isinstance`` and treat
anything else as ``InvalidDestination``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from chatcore.core.errors import InvalidDestination


@dataclass(frozen=True)
class GroupDestination:
    group_id: str


@dataclass(frozen=True)
class DirectDestination:
    peer_id: str


Destination = Union[GroupDestination, DirectDestination]


def destination_from_fields(group_id: str | None, receiver_id: str | None) -> Destination:
    """Build a destination from the two optional request fields (exactly one must be set)."""
    group_id = group_id or None
    receiver_id = receiver_id or None

    if group_id and receiver_id:
        raise InvalidDestination("Only one of group_id or receiver_id may be set")
    if group_id:
        return GroupDestination(group_id=group_id)
    if receiver_id:
        return DirectDestination(peer_id=receiver_id)
    raise InvalidDestination()


def destination_fields(destination: Destination) -> tuple[str | None, str | None]:
    """Inverse of destination_from_fields: (group_id, receiver_id) column values."""
    if isinstance(destination, GroupDestination):
        return destination.group_id, None
    if isinstance(destination, DirectDestination):
        return None, destination.peer_id
    raise InvalidDestination(f"Unsupported destination: {destination!r}")
