"""
Database seed data.
Demo data population for fresh development installations.
"""


def seed_database(db):
    """Insert demo branches, room types, rooms, a customer and a travel company."""

    # 1. Branches
    branches_data = [
        ('Colombo City', '12 Galle Road, Colombo'),
        ('Kandy Hills', '4 Lake Drive, Kandy'),
    ]
    for name, address in branches_data:
        db.execute('INSERT INTO branches (name, address) VALUES (?, ?)', (name, address))

    # 2. Room types
    room_types_data = [
        ('Standard', 'Queen bed, city view', '100.00'),
        ('Deluxe', 'King bed, balcony', '150.00'),
        ('Suite', 'Separate living area', '260.00'),
    ]
    for type_name, description, base_price in room_types_data:
        db.execute('''
            INSERT INTO room_types (type_name, description, base_price)
            VALUES (?, ?, ?)
        ''', (type_name, description, base_price))

    type_ids = {
        row['type_name']: row['id']
        for row in db.execute('SELECT id, type_name FROM room_types').fetchall()
    }

    # 3. Rooms: floor 1 standard, floor 2 deluxe, floor 3 suites.
    # Suites carry their own nightly price; others fall back to the type price.
    for branch_id in (1, 2):
        for number in range(101, 111):
            db.execute('''
                INSERT INTO rooms (branch_id, room_type_id, room_number, status)
                VALUES (?, ?, ?, 'Available')
            ''', (branch_id, type_ids['Standard'], str(number)))
        for number in range(201, 206):
            db.execute('''
                INSERT INTO rooms (branch_id, room_type_id, room_number, status)
                VALUES (?, ?, ?, 'Available')
            ''', (branch_id, type_ids['Deluxe'], str(number)))
        for number in range(301, 303):
            db.execute('''
                INSERT INTO rooms (branch_id, room_type_id, room_number, status, price_per_night)
                VALUES (?, ?, ?, 'Available', ?)
            ''', (branch_id, type_ids['Suite'], str(number), '280.00'))

    # 4. Parties
    db.execute('''
        INSERT INTO customers (full_name, email, phone, address)
        VALUES ('Nimal Perera', 'nimal@example.com', '0771234567', 'Colombo')
    ''')
    db.execute('''
        INSERT INTO travel_companies (company_name, contact_person, email, phone, discount_rate)
        VALUES ('Island Tours', 'Ruwan Silva', 'bookings@islandtours.example', '0112345678', 12.5)
    ''')
