"""
Reservation data access functions.
Re-exports the reservation operations from the split modules:
- reservation_lifecycle.py: State-changing operations
- reservation_queries.py: Listings, details, invoices and room status
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# Lifecycle
from .reservation_lifecycle import (
    # Create
    create_reservation,
    # Stay
    check_in_reservation,
    check_out_reservation,
    update_checkout_date,
    # Charges and payment
    add_optional_charge,
    add_payment_details,
    # Closing
    cancel_reservation,
    complete_reservation,
)

# Queries
from .reservation_queries import (
    get_reservation,
    get_reservation_rooms,
    list_reservations,
    get_customer_reservations,
    get_reservation_invoice,
    get_customer_billing,
    get_rooms_status,
)

__all__ = [
    'create_reservation',
    'check_in_reservation',
    'check_out_reservation',
    'update_checkout_date',
    'add_optional_charge',
    'add_payment_details',
    'cancel_reservation',
    'complete_reservation',
    'get_reservation',
    'get_reservation_rooms',
    'list_reservations',
    'get_customer_reservations',
    'get_reservation_invoice',
    'get_customer_billing',
    'get_rooms_status',
]
