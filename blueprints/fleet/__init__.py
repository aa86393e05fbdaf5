"""
Fleet blueprint initialization.
Registers the JSON API for scooters, rentals, customers and availability.

Individual route logic is in:
- routes/scooters.py - Scooter CRUD
- routes/rentals.py - Rental CRUD and lifecycle
- routes/customers.py - Customer CRUD
- routes/availability.py - Availability, optimizer, swaps, status and stats
"""

from flask import Blueprint

# Create main fleet blueprint
fleet_bp = Blueprint('fleet', __name__)

# =============================================================================
# REGISTER SUB-BLUEPRINTS
# =============================================================================

from blueprints.fleet.routes import api_bp
fleet_bp.register_blueprint(api_bp, url_prefix='/api')
