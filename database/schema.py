"""
Database schema definitions.
Table creation, indexes, overlap triggers and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'blocked_booking_billing',
        'blocked_booking_rooms',
        'blocked_bookings',
        'reservation_payment_details',
        'billing_charges',
        'billing',
        'booked_rooms',
        'reservations',
        'travel_companies',
        'customers',
        'rooms',
        'room_types',
        'branches'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Property Tables
    db.execute('''
        CREATE TABLE branches (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            address TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    db.execute('''
        CREATE TABLE room_types (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            type_name TEXT UNIQUE NOT NULL,
            description TEXT,
            base_price DECIMAL(10, 2) NOT NULL DEFAULT 0
        )
    ''')

    db.execute('''
        CREATE TABLE rooms (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            branch_id INTEGER NOT NULL REFERENCES branches(id),
            room_type_id INTEGER NOT NULL REFERENCES room_types(id),
            room_number TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'Available'
                CHECK (status IN ('Available', 'Occupied', 'Maintenance')),
            price_per_night DECIMAL(10, 2),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(branch_id, room_number)
        )
    ''')

    # 2. Party Tables
    db.execute('''
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            full_name TEXT NOT NULL,
            email TEXT UNIQUE NOT NULL,
            phone TEXT,
            address TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    db.execute('''
        CREATE TABLE travel_companies (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            company_name TEXT NOT NULL,
            contact_person TEXT,
            email TEXT UNIQUE NOT NULL,
            phone TEXT,
            discount_rate DECIMAL(5, 2) NOT NULL DEFAULT 0
                CHECK (discount_rate >= 0 AND discount_rate <= 100),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 3. Reservation Tables
    db.execute('''
        CREATE TABLE reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            branch_id INTEGER NOT NULL REFERENCES branches(id),
            customer_id INTEGER NOT NULL REFERENCES customers(id),
            check_in_date DATE NOT NULL,
            check_out_date DATE NOT NULL,
            number_of_occupants INTEGER NOT NULL CHECK (number_of_occupants > 0),
            number_of_rooms INTEGER NOT NULL CHECK (number_of_rooms > 0),
            payment_status TEXT NOT NULL DEFAULT 'Pending'
                CHECK (payment_status IN ('Pending', 'Confirmed', 'Paid')),
            reservation_status TEXT NOT NULL DEFAULT 'No_show'
                CHECK (reservation_status IN ('No_show', 'Confirmed', 'Cancelled', 'Completed')),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (check_out_date > check_in_date)
        )
    ''')

    db.execute('''
        CREATE TABLE booked_rooms (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER NOT NULL REFERENCES reservations(id),
            room_id INTEGER NOT NULL REFERENCES rooms(id),
            UNIQUE(reservation_id, room_id)
        )
    ''')

    db.execute('''
        CREATE TABLE billing (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER UNIQUE NOT NULL REFERENCES reservations(id),
            total_amount DECIMAL(10, 2) NOT NULL DEFAULT 0,
            tax_amount DECIMAL(10, 2) NOT NULL DEFAULT 0,
            other_charges DECIMAL(10, 2) NOT NULL DEFAULT 0,
            billing_date DATE NOT NULL,
            status TEXT NOT NULL DEFAULT 'Unpaid' CHECK (status IN ('Unpaid', 'Paid'))
        )
    ''')

    db.execute('''
        CREATE TABLE billing_charges (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            billing_id INTEGER NOT NULL REFERENCES billing(id) ON DELETE CASCADE,
            amount DECIMAL(10, 2) NOT NULL,
            description TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    db.execute('''
        CREATE TABLE reservation_payment_details (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER UNIQUE NOT NULL REFERENCES reservations(id),
            card_type TEXT NOT NULL,
            card_last_four TEXT NOT NULL,
            card_exp_month INTEGER NOT NULL,
            card_exp_year INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 4. Travel Company Bulk Holds
    db.execute('''
        CREATE TABLE blocked_bookings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            company_id INTEGER NOT NULL REFERENCES travel_companies(id),
            branch_id INTEGER NOT NULL REFERENCES branches(id),
            room_type_id INTEGER NOT NULL REFERENCES room_types(id),
            start_date DATE NOT NULL,
            end_date DATE NOT NULL,
            number_of_rooms INTEGER NOT NULL CHECK (number_of_rooms > 0),
            status TEXT NOT NULL DEFAULT 'Active' CHECK (status IN ('Active', 'Cancelled')),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (end_date > start_date)
        )
    ''')

    db.execute('''
        CREATE TABLE blocked_booking_rooms (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            blocked_booking_id INTEGER NOT NULL REFERENCES blocked_bookings(id),
            room_id INTEGER NOT NULL REFERENCES rooms(id),
            UNIQUE(blocked_booking_id, room_id)
        )
    ''')

    db.execute('''
        CREATE TABLE blocked_booking_billing (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            blocked_booking_id INTEGER UNIQUE NOT NULL REFERENCES blocked_bookings(id),
            room_charge DECIMAL(10, 2) NOT NULL,
            discount_amount DECIMAL(10, 2) NOT NULL DEFAULT 0,
            tax_amount DECIMAL(10, 2) NOT NULL DEFAULT 0,
            total_amount DECIMAL(10, 2) NOT NULL,
            billing_date DATE NOT NULL,
            status TEXT NOT NULL DEFAULT 'Unpaid' CHECK (status IN ('Unpaid', 'Paid'))
        )
    ''')


def create_indexes(db):
    """Create database indexes for performance."""

    # Room indexes
    db.execute('CREATE INDEX idx_rooms_branch_type ON rooms(branch_id, room_type_id, status)')

    # Reservation indexes
    db.execute('CREATE INDEX idx_reservations_dates ON reservations(check_in_date, check_out_date)')
    db.execute('CREATE INDEX idx_reservations_customer ON reservations(customer_id)')
    db.execute('CREATE INDEX idx_reservations_status ON reservations(reservation_status)')
    db.execute('CREATE INDEX idx_booked_rooms_room ON booked_rooms(room_id)')

    # Billing indexes
    db.execute('CREATE INDEX idx_billing_date ON billing(billing_date)')

    # Blocked booking indexes
    db.execute('CREATE INDEX idx_blocked_bookings_dates ON blocked_bookings(start_date, end_date)')
    db.execute('CREATE INDEX idx_blocked_booking_rooms_room ON blocked_booking_rooms(room_id)')


# Active links on a room whose [start, end) intersects the given window.
# Placeholders are filled with SQL expressions by create_triggers().
_ACTIVE_OVERLAP_EXISTS = '''
    EXISTS (
        SELECT 1 FROM booked_rooms br
        JOIN reservations r ON br.reservation_id = r.id
        WHERE br.room_id = {room}
          AND r.reservation_status != 'Cancelled'
          AND r.check_in_date < {end}
          AND r.check_out_date > {start}
          {exclude_reservation}
    )
    OR EXISTS (
        SELECT 1 FROM blocked_booking_rooms bbr
        JOIN blocked_bookings b ON bbr.blocked_booking_id = b.id
        WHERE bbr.room_id = {room}
          AND b.status = 'Active'
          AND b.start_date < {end}
          AND b.end_date > {start}
          {exclude_block}
    )
'''


def create_triggers(db):
    """
    Create storage-level guards against double-booking.

    Each trigger aborts with 'room_overlap' when a write would leave two
    active links on the same room with intersecting date ranges.
    """
    booked_room_overlap = _ACTIVE_OVERLAP_EXISTS.format(
        room='NEW.room_id',
        start='(SELECT check_in_date FROM reservations WHERE id = NEW.reservation_id)',
        end='(SELECT check_out_date FROM reservations WHERE id = NEW.reservation_id)',
        exclude_reservation='AND r.id != NEW.reservation_id',
        exclude_block=''
    )
    db.execute(f'''
        CREATE TRIGGER trg_booked_rooms_no_overlap
        BEFORE INSERT ON booked_rooms
        WHEN {booked_room_overlap}
        BEGIN
            SELECT RAISE(ABORT, 'room_overlap');
        END
    ''')

    blocked_room_overlap = _ACTIVE_OVERLAP_EXISTS.format(
        room='NEW.room_id',
        start='(SELECT start_date FROM blocked_bookings WHERE id = NEW.blocked_booking_id)',
        end='(SELECT end_date FROM blocked_bookings WHERE id = NEW.blocked_booking_id)',
        exclude_reservation='',
        exclude_block='AND b.id != NEW.blocked_booking_id'
    )
    db.execute(f'''
        CREATE TRIGGER trg_blocked_booking_rooms_no_overlap
        BEFORE INSERT ON blocked_booking_rooms
        WHEN {blocked_room_overlap}
        BEGIN
            SELECT RAISE(ABORT, 'room_overlap');
        END
    ''')

    # Extending a stay must not run into another active link on its rooms
    extension_overlap = _ACTIVE_OVERLAP_EXISTS.format(
        room='own.room_id',
        start='OLD.check_out_date',
        end='NEW.check_out_date',
        exclude_reservation='AND r.id != NEW.id',
        exclude_block=''
    )
    db.execute(f'''
        CREATE TRIGGER trg_reservations_extend_no_overlap
        BEFORE UPDATE OF check_out_date ON reservations
        WHEN NEW.check_out_date > OLD.check_out_date
          AND NEW.reservation_status != 'Cancelled'
          AND EXISTS (
            SELECT 1 FROM booked_rooms own
            WHERE own.reservation_id = NEW.id
              AND ({extension_overlap})
          )
        BEGIN
            SELECT RAISE(ABORT, 'room_overlap');
        END
    ''')
