"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.

Credentials are verified upstream by the gateway, which forwards the
authenticated principal in request headers:

    X-Principal-Role: customer | clerk | manager | admin | travel_company
    X-Principal-Id:   customer id or travel company id (staff: staff id)
"""

from flask import jsonify
from flask_login import LoginManager, UserMixin

ROLE_HEADER = 'X-Principal-Role'
ID_HEADER = 'X-Principal-Id'

ROLES = ('customer', 'clerk', 'manager', 'admin', 'travel_company')

# Initialize Flask-Login
login_manager = LoginManager()


class Principal(UserMixin):
    """Authenticated caller as supplied by the identity provider."""

    def __init__(self, role: str, principal_id: int = None):
        self.role = role
        self.principal_id = principal_id

    def get_id(self):
        return f'{self.role}:{self.principal_id}'

    @property
    def customer_id(self):
        return self.principal_id if self.role == 'customer' else None

    @property
    def company_id(self):
        return self.principal_id if self.role == 'travel_company' else None


@login_manager.request_loader
def load_principal(request):
    """
    Build the principal from the gateway headers for Flask-Login.

    Args:
        request: Incoming request

    Returns:
        Principal or None if the headers are missing or malformed
    """
    role = (request.headers.get(ROLE_HEADER) or '').strip().lower()
    if role not in ROLES:
        return None

    raw_id = request.headers.get(ID_HEADER)
    principal_id = None
    if raw_id:
        try:
            principal_id = int(raw_id)
        except ValueError:
            return None

    # Customers and travel companies act on their own records
    if role in ('customer', 'travel_company') and not principal_id:
        return None

    return Principal(role, principal_id)


@login_manager.unauthorized_handler
def unauthorized():
    """Answer unauthenticated API calls with JSON instead of a redirect."""
    return jsonify({'success': False, 'error': 'Authentication required'}), 401
