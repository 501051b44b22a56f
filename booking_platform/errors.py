"""
Domain errors for the booking core.

Services raise these; the HTTP layer maps ``kind`` to a status code.
Anything that is not a ``BookingError`` (database down, driver errors)
is an infrastructure failure and propagates untouched.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    TENANT_NOT_SPECIFIED = "TenantNotSpecified"
    TENANT_NOT_FOUND = "TenantNotFound"
    SERVICE_NOT_FOUND = "ServiceNotFound"
    STAFF_NOT_FOUND = "StaffNotFound"
    STAFF_DOES_NOT_PROVIDE_SERVICE = "StaffDoesNotProvideService"
    CLIENT_INFORMATION_REQUIRED = "ClientInformationRequired"
    CLIENT_NOT_FOUND = "ClientNotFound"
    SLOT_UNAVAILABLE = "SlotUnavailable"
    CLASS_FULL = "ClassFull"
    APPOINTMENT_NOT_FOUND = "AppointmentNotFound"
    INVALID_STATUS_TRANSITION = "InvalidStatusTransition"
    CONCURRENCY_CONFLICT = "ConcurrencyConflict"
    VALIDATION_FAILED = "ValidationFailed"
    BOOKING_LOCK_TIMEOUT = "BookingLockTimeout"


class BookingError(Exception):
    """Base class for every recoverable domain failure"""

    kind: ErrorKind = ErrorKind.VALIDATION_FAILED
    default_message = "Request could not be processed"
    retryable = False

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(BookingError):
    """Marker for errors that must look identical to a missing record"""


class ConflictError(BookingError):
    """Marker for booking conflicts ("pick another time")"""


class TenantNotSpecified(BookingError):
    kind = ErrorKind.TENANT_NOT_SPECIFIED
    default_message = "Tenant not specified"


class TenantNotFound(NotFoundError):
    kind = ErrorKind.TENANT_NOT_FOUND
    default_message = "Tenant not found"


class ServiceNotFound(NotFoundError):
    kind = ErrorKind.SERVICE_NOT_FOUND
    default_message = "Service not found"


class StaffNotFound(NotFoundError):
    kind = ErrorKind.STAFF_NOT_FOUND
    default_message = "Staff member not found"


class StaffDoesNotProvideService(BookingError):
    kind = ErrorKind.STAFF_DOES_NOT_PROVIDE_SERVICE
    default_message = "Staff member does not provide this service"


class ClientInformationRequired(BookingError):
    kind = ErrorKind.CLIENT_INFORMATION_REQUIRED
    default_message = "Client information required"


class ClientNotFound(NotFoundError):
    kind = ErrorKind.CLIENT_NOT_FOUND
    default_message = "Client not found"


class SlotUnavailable(ConflictError):
    kind = ErrorKind.SLOT_UNAVAILABLE
    default_message = "Time slot is not available"


class ClassFull(ConflictError):
    kind = ErrorKind.CLASS_FULL
    default_message = "Class is at full capacity"


class AppointmentNotFound(NotFoundError):
    kind = ErrorKind.APPOINTMENT_NOT_FOUND
    default_message = "Appointment not found"


class InvalidStatusTransition(ConflictError):
    kind = ErrorKind.INVALID_STATUS_TRANSITION
    default_message = "Status transition is not allowed"


class ConcurrencyConflict(ConflictError):
    kind = ErrorKind.CONCURRENCY_CONFLICT
    default_message = "The record was modified by another user. Please refresh and try again."


class ValidationFailed(BookingError):
    kind = ErrorKind.VALIDATION_FAILED
    default_message = "Validation failed"


class BookingLockTimeout(BookingError):
    kind = ErrorKind.BOOKING_LOCK_TIMEOUT
    default_message = "The calendar is busy. Please retry in a moment."
    retryable = True
