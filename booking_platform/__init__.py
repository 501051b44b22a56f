"""
Booking Platform core.

Multi-tenant appointment booking: availability computation,
double-booking prevention, tenant isolation and the appointment
status lifecycle.
"""
