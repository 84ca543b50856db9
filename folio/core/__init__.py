"""
Folio Core
==========

Core utilities and shared functionality for Folio modules.
"""

from .config import Config, get_config_value
from .database import Database
from .logging_service import LoggingService, logger
from .auth import admin_required, admin_api_required

__all__ = [
    'Config', 'get_config_value', 'Database', 'LoggingService', 'logger',
    'admin_required', 'admin_api_required',
]
