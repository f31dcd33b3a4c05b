"""Calendar Engine HTTP API"""

from .app import create_app
from .routes import calendar_bp

__all__ = ['create_app', 'calendar_bp']
