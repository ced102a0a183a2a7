# campaign_app/routes/__init__.py
"""
Application routes package
"""

from .health import register_health_routes


def init_routes(app):
    """Initialize all application routes"""
    register_health_routes(app)
