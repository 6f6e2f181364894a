"""
Centralized user-facing messages.
All result and error text in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'reservation_created': 'Reservation created successfully',
    'reservation_checked_in': 'Guest checked in successfully',
    'reservation_checked_out': 'Guest checked out and bill finalized',
    'reservation_extended': 'Checkout date updated successfully',
    'reservation_cancelled': 'Reservation cancelled successfully',
    'reservation_completed': 'Reservation marked as complete',
    'charge_added': 'Optional charge added successfully',
    'payment_details_added': 'Payment details added successfully',
    'block_created': 'Blocked booking created successfully',
    'block_cancelled': 'Blocked booking cancelled successfully',
    'block_billed': 'Blocked booking billed successfully',
    'rooms_available': 'Rooms available',

    # Validation errors
    'missing_fields': 'Missing required fields',
    'invalid_date': 'Invalid date format, expected YYYY-MM-DD',
    'invalid_date_range': 'Check-out date must be after check-in date',
    'invalid_report_range': 'from_date must not be after to_date',
    'invalid_occupants': 'Number of occupants must be a positive integer',
    'invalid_room_count': 'Number of rooms must be a positive integer',
    'invalid_room_ids': 'Room ids must be a list of distinct positive integers',
    'invalid_id': '{field} must be a positive integer',
    'room_selection_required': 'Provide either room_type_id with number_of_rooms, or room_ids',
    'room_count_mismatch': 'number_of_rooms does not match the selected rooms',
    'customer_required': 'Provide either an authenticated customer or guest details',
    'invalid_guest': 'Guest details require full_name and a valid email',
    'invalid_amount': 'Charge amount must be greater than zero',
    'checkout_not_later': 'New checkout date must be after current checkout date',
    'rooms_not_in_branch': 'Some rooms do not belong to the selected branch',
    'rooms_not_found': 'Some rooms do not exist',
    'block_too_small': 'Blocked bookings must reserve more than {minimum} rooms',
    'invalid_group_by': "group_by must be one of 'daily' or 'monthly'",
    'invalid_card': 'Card type, a valid card number and expiry month/year are required',
    'payment_details_exist': 'Payment details for this reservation already exist',

    # Not found
    'branch_not_found': 'Branch {branch_id} not found',
    'room_type_not_found': 'Room type {room_type_id} not found',
    'customer_not_found': 'Customer {customer_id} not found',
    'company_not_found': 'Travel company {company_id} not found',
    'reservation_not_found': 'Reservation {reservation_id} not found',
    'block_not_found': 'Blocked booking {blocked_booking_id} not found',
    'invoice_not_found': 'Invoice not found for reservation {reservation_id}',

    # Availability
    'insufficient_rooms': 'Not enough rooms available. Requested: {requested}, Available: {available}',
    'rooms_unavailable': 'One or more rooms are already booked for the selected dates',
    'extension_unavailable': 'Rooms are not available for the extended dates',

    # Invalid state
    'checkin_requires_confirmed': "Reservation status must be 'Confirmed' to check-in",
    'not_checked_in': 'Reservation is not checked-in',
    'dates_locked': 'Cannot update dates for a {status} reservation',
    'charge_on_cancelled': 'Cannot add charges to a cancelled reservation',
    'already_cancelled': 'Reservation is already cancelled',
    'cancel_completed': 'Completed reservations cannot be cancelled',
    'already_completed': 'Reservation is already completed',
    'complete_cancelled': 'Cancelled reservations cannot be marked as complete',
    'complete_unpaid': 'Only paid reservations can be marked as complete',
    'payment_on_closed': 'Cannot add payment details to a {status} reservation',
    'block_already_cancelled': 'Blocked booking is already cancelled',
    'block_ended': 'Blocked booking cannot be cancelled after its end date',
    'block_already_billed': 'Blocked booking has already been billed',
    'block_cancelled_billing': 'Cancelled blocked bookings cannot be billed',
}
