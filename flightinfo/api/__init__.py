"""
HTTP surface for the flight information service.
"""

from .app import create_app

__all__ = ['create_app']
