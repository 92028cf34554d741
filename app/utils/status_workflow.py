"""
Property status transition table.
Single source of truth for which lifecycle changes are allowed and who may make them.
"""

from typing import Dict, FrozenSet, Optional
from app.models.property import PropertyStatus


ALLOWED_TRANSITIONS: Dict[PropertyStatus, FrozenSet[PropertyStatus]] = {
    PropertyStatus.DRAFT: frozenset({PropertyStatus.PENDING}),
    PropertyStatus.PENDING: frozenset({PropertyStatus.ACTIVE, PropertyStatus.REJECTED}),
    PropertyStatus.ACTIVE: frozenset({
        PropertyStatus.UNDER_CONTRACT,
        PropertyStatus.SOLD,
        PropertyStatus.RENTED,
        PropertyStatus.OFF_MARKET,
    }),
    PropertyStatus.UNDER_CONTRACT: frozenset({
        PropertyStatus.ACTIVE,
        PropertyStatus.SOLD,
        PropertyStatus.RENTED,
    }),
    PropertyStatus.REJECTED: frozenset({PropertyStatus.PENDING}),
    PropertyStatus.OFF_MARKET: frozenset({PropertyStatus.PENDING}),
    PropertyStatus.SOLD: frozenset(),
    PropertyStatus.RENTED: frozenset(),
}

# Transitions reserved for moderators
MODERATION_TRANSITIONS = frozenset({
    (PropertyStatus.PENDING, PropertyStatus.ACTIVE),
    (PropertyStatus.PENDING, PropertyStatus.REJECTED),
})

# Transitions only the listing owner performs (resubmission and publishing)
OWNER_ONLY_TRANSITIONS = frozenset({
    (PropertyStatus.DRAFT, PropertyStatus.PENDING),
    (PropertyStatus.REJECTED, PropertyStatus.PENDING),
    (PropertyStatus.OFF_MARKET, PropertyStatus.PENDING),
})


def allowed_next_statuses(current: PropertyStatus) -> FrozenSet[PropertyStatus]:
    return ALLOWED_TRANSITIONS.get(current, frozenset())


def can_transition(current: PropertyStatus, requested: PropertyStatus) -> bool:
    """True when `requested` is a legal next status for `current`."""
    return requested in allowed_next_statuses(current)


def is_moderation_transition(current: PropertyStatus, requested: PropertyStatus) -> bool:
    return (current, requested) in MODERATION_TRANSITIONS


def is_owner_only_transition(current: PropertyStatus, requested: PropertyStatus) -> bool:
    return (current, requested) in OWNER_ONLY_TRANSITIONS


def is_terminal(status: PropertyStatus) -> bool:
    return not allowed_next_statuses(status)


def transition_message(requested: PropertyStatus, previous: Optional[PropertyStatus] = None) -> str:
    """Human-readable result message for a status change."""
    if previous == PropertyStatus.PENDING and requested == PropertyStatus.ACTIVE:
        return "Property approved successfully"
    if requested == PropertyStatus.REJECTED:
        return "Property rejected successfully"
    return f"Property status updated to {requested.value}"
