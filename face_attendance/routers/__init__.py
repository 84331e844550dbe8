"""
API routers.
Services are injected by main.create_app() through set_services.
"""

from . import attendance, identities, recognition
from .dependencies import set_services

__all__ = ['attendance', 'identities', 'recognition', 'set_services']
