"""
Routes package for the order cycle administration service
"""

from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.routes")


def init_app(app):
    """Register all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from cycle_admin.presentation.routes.order_cycles import bp as order_cycles_bp
    app.register_blueprint(order_cycles_bp, url_prefix='/admin/order_cycles')

    logger.debug("Route blueprints registered")
