"""
Public Site Module
==================

Public-facing portfolio pages and API:
- / (hero, about and featured projects)
- /about
- /projects/ listing and a CORS-enabled JSON feed
"""

from flask import Blueprint

public_bp = Blueprint(
    'public',
    __name__,
    template_folder='templates',
)

from . import routes

__all__ = ['public_bp']
