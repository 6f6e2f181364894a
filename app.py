"""
Hotel Booking - Reservation and Room Availability Service
Flask application factory and initialization
"""

import os
import click
import logging
from flask import Flask, jsonify, g
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager

# Import database functions
from database import close_db, init_db, get_db


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    config_class = config[config_name]
    if hasattr(config_class, 'validate'):
        config_class.validate()
    app.config.from_object(config_class)

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.api.routes import api_bp
    from blueprints.reservations.routes import reservations_bp
    from blueprints.customer.routes import customer_bp
    from blueprints.blocked_bookings.routes import blocked_bookings_bp
    from blueprints.reports import reports_bp

    # Register blueprints
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(reservations_bp, url_prefix='/reservations')
    app.register_blueprint(customer_bp, url_prefix='/customer')
    app.register_blueprint(blocked_bookings_bp, url_prefix='/blocked-bookings')
    app.register_blueprint(reports_bp, url_prefix='/reports')


def register_error_handlers(app):
    """Register error handlers."""

    @app.errorhandler(400)
    def bad_request_error(error):
        """Handle 400 errors (malformed JSON bodies)."""
        return jsonify({'success': False, 'error': 'Bad request'}), 400

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return jsonify({'success': False, 'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 errors."""
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        app.logger.error(f'Internal server error: {getattr(error, "original_exception", error)}')
        return jsonify({'success': False, 'error': 'Internal server error'}), 500


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    @click.option('--seed/--no-seed', default=False, help='Insert demo data after creating the schema.')
    def init_db_command(seed):
        """Initialize database schema (drops existing data)."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db(seed=seed)
        click.echo('Database initialized successfully!')

    @app.cli.command('seed-db')
    def seed_db_command():
        """Insert demo branches, rooms, a customer and a travel company."""
        from database.seed import seed_database

        with app.app_context():
            db = get_db()
            seed_database(db)
            db.commit()
        click.echo('Demo data inserted.')

    @app.cli.command('sweep-unpaid')
    @click.option('--since', default=None, help='Creation cutoff, YYYY-MM-DD (default: today).')
    def sweep_unpaid_command(since):
        """Cancel reservations still pending payment created since the cutoff."""
        from datetime import datetime
        from models.sweeps import run_unpaid_sweep

        cutoff = None
        if since:
            try:
                cutoff = datetime.strptime(since, '%Y-%m-%d')
            except ValueError:
                raise click.BadParameter('expected YYYY-MM-DD', param_hint='--since')

        with app.app_context():
            count = run_unpaid_sweep(get_db(), cutoff=cutoff)
        click.echo(f'Cancelled {count} unpaid reservation(s).')

    @app.cli.command('sweep-completed')
    @click.option('--today', default=None, help='Reference date, YYYY-MM-DD (default: today).')
    def sweep_completed_command(today):
        """Mark reservations past their checkout date as Completed."""
        from models.sweeps import run_completion_sweep
        from utils.validators import parse_date

        reference = None
        if today:
            reference = parse_date(today)
            if reference is None:
                raise click.BadParameter('expected YYYY-MM-DD', param_hint='--today')

        with app.app_context():
            count = run_completion_sweep(get_db(), today=reference)
        click.echo(f'Completed {count} reservation(s).')


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    models_logger = logging.getLogger('models')

    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/hotel_booking.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        if file_handler not in models_logger.handlers:
            models_logger.addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        models_logger.setLevel(logging.INFO)
        app.logger.info('HotelBooking startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)
        models_logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
