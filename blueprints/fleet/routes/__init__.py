"""
Fleet API routes package.
Split into smaller modules by entity for maintainability.
"""

from flask import Blueprint

# Create the API blueprint
api_bp = Blueprint('api', __name__)

# Import and register routes from submodules
from blueprints.fleet.routes import scooters
from blueprints.fleet.routes import rentals
from blueprints.fleet.routes import customers
from blueprints.fleet.routes import availability

# Register all route functions on the blueprint
scooters.register_routes(api_bp)
rentals.register_routes(api_bp)
customers.register_routes(api_bp)
availability.register_routes(api_bp)
