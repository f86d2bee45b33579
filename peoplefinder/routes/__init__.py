# peoplefinder/routes/__init__.py
"""
Application routes package
"""

from .completion import register_completion_routes
from .reports import register_report_routes


def init_routes(app):
    """Initialize all application routes"""
    register_completion_routes(app)
    register_report_routes(app)
