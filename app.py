"""
ScooterFleet - rental desk backend for a scooter fleet.

Builds the Flask app: JSON API blueprints, login, CLI and logging.
"""

import os
import click
import logging
from flask import Flask, g
from dotenv import load_dotenv

load_dotenv()

from config import config
from extensions import login_manager, csrf
from database import close_db, init_db


def create_app(config_name=None):
    """
    Build a configured application.

    Args:
        config_name: Key of the `config` dict; defaults to $FLASK_ENV
            or 'development'

    Returns:
        Flask application instance

    Raises:
        ValueError: If production settings are missing
    """
    config_name = config_name or os.environ.get('FLASK_ENV', 'development')
    settings = config[config_name]
    if config_name == 'production':
        settings.validate()

    app = Flask(__name__)
    app.config.from_object(settings)

    initialize_extensions(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_cli_commands(app)
    register_teardown_handlers(app)
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Bind Flask-Login and CSRF protection to the app."""
    login_manager.init_app(app)
    csrf.init_app(app)


def register_blueprints(app):
    """Mount auth at the root, the fleet API under /fleet and health under /api."""
    from blueprints.auth.routes import auth_bp
    from blueprints.fleet import fleet_bp
    from blueprints.api.routes import api_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(fleet_bp, url_prefix='/fleet')
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.route('/')
    def index():
        """Service banner."""
        from utils.api_response import api_success

        return api_success(data={
            'app': app.config.get('APP_NAME', 'ScooterFleet'),
            'version': app.config.get('APP_VERSION', '1.0.0')
        })


def register_error_handlers(app):
    """Answer framework errors with the JSON error envelope."""
    from utils.api_response import api_error
    from utils.messages import MESSAGES

    @app.errorhandler(404)
    def not_found_error(error):
        return api_error(MESSAGES['not_found'], status=404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return api_error('Method not allowed', status=405)

    @app.errorhandler(500)
    def internal_error(error):
        # Leave no half-written transaction on the request connection
        db = g.get('db')
        if db:
            db.rollback()
        app.logger.error('Unhandled error: %s', error)
        return api_error(MESSAGES['internal_error'], status=500)


def _echo_availability(result, count):
    click.echo(f'Available: {len(result["available"])} (need {count})')
    for entry in result['available']:
        click.echo(f'  {entry["scooter"]["license_plate"]} ({entry["scooter"]["size"]})')
    for entry in result['same_day_available']:
        click.echo(
            f'  {entry["scooter"]["license_plate"]} from {entry["available_from"]} '
            f'(returned by {entry["customer_name"]})'
        )
    if not result['has_enough']:
        click.echo(f'Short by {count - len(result["available"])} for the whole window')


def register_cli_commands(app):
    """Add `flask init-db`, `flask check-availability` and `flask fleet-status`."""

    @app.cli.command('init-db')
    @click.option('--no-seed', is_flag=True, help='Create the schema without the demo fleet.')
    def init_db_command(no_seed):
        """Recreate the database (all data is lost)."""
        with app.app_context():
            init_db(with_seed=not no_seed)
        click.echo(f'Database ready at {app.config["DATABASE_PATH"]}')

    @app.cli.command('check-availability')
    @click.argument('start_date')
    @click.argument('end_date')
    @click.option('--size', default='any', type=click.Choice(['any', 'small', 'large']))
    @click.option('--count', default=1, type=int, help='Number of scooters needed.')
    @click.option('--optimize', is_flag=True, help='Also suggest swaps to free more scooters.')
    def check_availability_command(start_date, end_date, size, count, optimize):
        """Print scooters available between START_DATE and END_DATE."""
        from blueprints.fleet.services.availability_service import (
            check_availability,
            optimize_availability,
        )

        with app.app_context():
            try:
                result = check_availability(start_date, end_date, count=count, size=size)
                plan = optimize_availability(start_date, end_date, size=size) if optimize else None
            except ValueError as e:
                raise click.ClickException(str(e))

        _echo_availability(result, count)
        for option in (plan or {}).get('available_with_swaps', []):
            moves = ', '.join(
                f'{s["rental"]["customer_name"]} -> {s["to_scooter"]["license_plate"]}'
                for s in option['swaps']
            )
            click.echo(f'  {option["scooter"]["license_plate"]} after moving {moves}')

    @app.cli.command('fleet-status')
    @click.option('--date', 'on_date', default=None, help='Day to report on (YYYY-MM-DD).')
    def fleet_status_command(on_date):
        """Print the fleet split into available, rented and maintenance."""
        from blueprints.fleet.services.availability_service import fleet_status

        with app.app_context():
            status = fleet_status(on_date)

        click.echo(f'Available: {len(status["available"])}')
        click.echo(f'Rented: {len(status["rented"])}')
        for entry in status['rented']:
            click.echo(f'  {entry["scooter"]["license_plate"]} until {entry["until_date"]}')
        click.echo(f'Maintenance: {len(status["maintenance"])}')


def register_teardown_handlers(app):
    """Release the per-context SQLite connection."""

    @app.teardown_appcontext
    def teardown_db(error):
        close_db(error)


def configure_logging(app):
    """
    File logging outside debug and testing.

    The handler is shared with the `models` and `blueprints` package loggers
    so rental writes and swap outcomes land in the same file.
    """
    if app.debug or app.testing:
        app.logger.setLevel(logging.DEBUG)
        return

    log_dir = app.config.get('LOG_DIR', 'logs')
    os.makedirs(log_dir, exist_ok=True)

    file_handler = logging.FileHandler(os.path.join(log_dir, 'scooterfleet.log'))
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s %(name)s: %(message)s'
    ))
    file_handler.setLevel(logging.INFO)

    for logger in (app.logger, logging.getLogger('models'), logging.getLogger('blueprints')):
        logger.addHandler(file_handler)
        logger.setLevel(logging.INFO)

    app.logger.info('ScooterFleet startup (%s)', app.config.get('APP_VERSION'))


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', debug=True)
