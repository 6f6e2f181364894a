"""
Status vocabularies for rooms, reservations, billing and blocked bookings.
Values match the CHECK constraints in database/schema.py.
"""

# =============================================================================
# ROOM STATUS
# =============================================================================

ROOM_AVAILABLE = 'Available'
ROOM_OCCUPIED = 'Occupied'
ROOM_MAINTENANCE = 'Maintenance'


# =============================================================================
# RESERVATION STATUS
# =============================================================================

# Staff check-in keeps a reservation Confirmed; there is no separate
# checked-in state.
RESERVATION_NO_SHOW = 'No_show'
RESERVATION_CONFIRMED = 'Confirmed'
RESERVATION_CANCELLED = 'Cancelled'
RESERVATION_COMPLETED = 'Completed'

RESERVATION_TERMINAL_STATES = (RESERVATION_CANCELLED, RESERVATION_COMPLETED)

# States that do not hold a room on a given night for occupancy counts
RESERVATION_NON_OCCUPYING_STATES = (RESERVATION_CANCELLED, RESERVATION_NO_SHOW)


# =============================================================================
# PAYMENT / BILLING STATUS
# =============================================================================

PAYMENT_PENDING = 'Pending'
PAYMENT_CONFIRMED = 'Confirmed'
PAYMENT_PAID = 'Paid'

BILLING_UNPAID = 'Unpaid'
BILLING_PAID = 'Paid'


# =============================================================================
# BLOCKED BOOKING STATUS
# =============================================================================

BLOCK_ACTIVE = 'Active'
BLOCK_CANCELLED = 'Cancelled'
