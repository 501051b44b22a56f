"""
Appointment status lifecycle.

Status changes go through ``ensure_transition``; nothing else should
assign ``Appointment.status`` after creation.
"""

from enum import Enum

from ...errors import InvalidStatusTransition


class AppointmentStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"


INITIAL_STATUS = AppointmentStatus.PENDING

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.NO_SHOW,
        }
    ),
    AppointmentStatus.IN_PROGRESS: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)


def is_terminal(status: AppointmentStatus) -> bool:
    return AppointmentStatus(status) in TERMINAL_STATUSES


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return AppointmentStatus(target) in ALLOWED_TRANSITIONS[AppointmentStatus(current)]


def ensure_transition(current: AppointmentStatus, target: AppointmentStatus) -> AppointmentStatus:
    """
    Validate ``current -> target``.

    Returns:
        The target status as an ``AppointmentStatus``

    Raises:
        InvalidStatusTransition: If the pair is not in ALLOWED_TRANSITIONS
    """
    current = AppointmentStatus(current)
    target = AppointmentStatus(target)
    if not can_transition(current, target):
        raise InvalidStatusTransition(
            f"Cannot change appointment status from {current.value} to {target.value}"
        )
    return target
