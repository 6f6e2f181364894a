"""
Pytest configuration and fixtures.
Each test gets an isolated SQLite file with a fresh schema.
"""

import os
import pytest

os.environ['FLASK_ENV'] = 'test'


@pytest.fixture
def db_path(tmp_path):
    """Path of the per-test database file."""
    return str(tmp_path / 'hotel_test.db')


@pytest.fixture
def app(db_path):
    """Create test application with isolated database."""
    from app import create_app
    from database import init_db

    os.environ['DATABASE_PATH'] = db_path

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['DATABASE_PATH'] = db_path

    with app.app_context():
        init_db()
        yield app


@pytest.fixture
def client(app):
    """Create test client."""
    from flask import g

    # Requests share the fixture's app context; drop Flask-Login's cached
    # principal so each request is authenticated from its own headers.
    @app.before_request
    def _reset_principal():
        g.pop('_login_user', None)

    return app.test_client()


@pytest.fixture
def db(app):
    """Connection bound to the test application context."""
    from database import get_db
    return get_db()


@pytest.fixture
def principal():
    """Build gateway headers for an authenticated principal."""
    def _headers(role, principal_id=None):
        headers = {'X-Principal-Role': role}
        if principal_id is not None:
            headers['X-Principal-Id'] = str(principal_id)
        return headers
    return _headers


# =============================================================================
# DATA FACTORIES
# =============================================================================

@pytest.fixture
def make_room(db):
    """Insert a room (price None falls back to the room type price)."""
    def _make(branch_id, room_type_id, room_number, status='Available', price=None):
        cursor = db.execute('''
            INSERT INTO rooms (branch_id, room_type_id, room_number, status, price_per_night)
            VALUES (?, ?, ?, ?, ?)
        ''', (branch_id, room_type_id, room_number, status, price))
        db.commit()
        return cursor.lastrowid
    return _make


@pytest.fixture
def make_customer(db):
    def _make(email='guest@example.com', full_name='Kamal Fernando'):
        cursor = db.execute(
            'INSERT INTO customers (full_name, email, phone) VALUES (?, ?, ?)',
            (full_name, email, '0771234567')
        )
        db.commit()
        return cursor.lastrowid
    return _make


@pytest.fixture
def make_company(db):
    def _make(name='Island Tours', discount_rate=10):
        cursor = db.execute('''
            INSERT INTO travel_companies (company_name, contact_person, email, discount_rate)
            VALUES (?, 'Ruwan Silva', ?, ?)
        ''', (name, f"{name.lower().replace(' ', '')}@example.com", discount_rate))
        db.commit()
        return cursor.lastrowid
    return _make


@pytest.fixture
def hotel(db, make_room):
    """
    One branch with six Standard rooms (100/night) and two Deluxe rooms
    (150/night), plus an empty second branch.

    Returns:
        dict: branch_id, other_branch_id, standard_type_id, deluxe_type_id,
        standard_rooms, deluxe_rooms
    """
    branch_id = db.execute(
        "INSERT INTO branches (name, address) VALUES ('Colombo City', 'Galle Road')"
    ).lastrowid
    other_branch_id = db.execute(
        "INSERT INTO branches (name, address) VALUES ('Kandy Hills', 'Lake Drive')"
    ).lastrowid
    standard_type_id = db.execute(
        "INSERT INTO room_types (type_name, base_price) VALUES ('Standard', 100)"
    ).lastrowid
    deluxe_type_id = db.execute(
        "INSERT INTO room_types (type_name, base_price) VALUES ('Deluxe', 150)"
    ).lastrowid
    db.commit()

    standard_rooms = [make_room(branch_id, standard_type_id, str(number)) for number in range(101, 107)]
    deluxe_rooms = [make_room(branch_id, deluxe_type_id, str(number)) for number in (201, 202)]

    return {
        'branch_id': branch_id,
        'other_branch_id': other_branch_id,
        'standard_type_id': standard_type_id,
        'deluxe_type_id': deluxe_type_id,
        'standard_rooms': standard_rooms,
        'deluxe_rooms': deluxe_rooms,
    }


@pytest.fixture
def guest():
    return {'full_name': 'Kamal Fernando', 'email': 'kamal@example.com', 'phone': '0771234567'}
