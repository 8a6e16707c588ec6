"""
Storefront backend-for-frontend
Flask application factory
"""
import os
import logging
from flask import Flask
from flask_cors import CORS

from .config import get_config, validate_config
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    # Setup logging before anything else
    setup_logging()

    validate_config(config_name)

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # Initialize caching (Redis with graceful fallback)
    from .utils.cache import init_cache
    init_cache(app)

    # Backend client, invalidation bus, redemption locks
    from .services import init_services
    init_services(app)

    # Configure CORS - allow storefront origins
    cors_origins = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]
    if os.getenv('STOREFRONT_ORIGIN'):
        cors_origins.append(os.getenv('STOREFRONT_ORIGIN'))
    CORS(app, origins=cors_origins, supports_credentials=True, allow_headers=['Content-Type', 'Authorization'])

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'storefront'}

    logger.info('Storefront app created (config=%s, backend=%s)', config_name, app.config['COMMERCE_BACKEND_URL'])
    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.cart import cart_bp
    from .api.coins import coins_bp
    from .api.products import products_bp
    from .api.orders import orders_bp

    # Cart totals and checkout summary
    app.register_blueprint(cart_bp, url_prefix='/api/carts')

    # Account coins and redemption (routes carry their own paths)
    app.register_blueprint(coins_bp, url_prefix='/api')

    # Product and order prices
    app.register_blueprint(products_bp, url_prefix='/api/products')
    app.register_blueprint(orders_bp, url_prefix='/api/orders')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from .utils.errors import exception_response
    from .utils.exceptions import StorefrontError

    @app.errorhandler(StorefrontError)
    def storefront_error(error):
        return exception_response(error)

    @app.errorhandler(400)
    def bad_request(error):
        return {'error': {'message': str(error), 'code': 'INVALID_REQUEST'}}, 400

    @app.errorhandler(404)
    def not_found(error):
        return {'error': {'message': str(error), 'code': 'NOT_FOUND'}}, 404

    @app.errorhandler(500)
    def internal_error(error):
        return {'error': {'message': 'Internal server error', 'code': 'INTERNAL_ERROR'}}, 500
