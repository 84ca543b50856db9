"""
Projects Admin Module
=====================

Admin interface for portfolio project management.
Plugs into the admin dashboard module.

Provides:
- Project creation, editing and deletion
- Featured flag for homepage placement
- Image upload with server-side compression
- AI-generated project thumbnails
"""

from flask import Blueprint

projects_bp = Blueprint(
    'projects_admin',
    __name__,
    url_prefix='/admin/projects',
    template_folder='templates',
    static_folder='static',
    static_url_path='/static'
)

from . import routes
from .database import ProjectStore
from .editor import EditFormController, EditState, ImageUpload, Notification

__all__ = ['projects_bp', 'ProjectStore', 'EditFormController', 'EditState', 'ImageUpload', 'Notification']
