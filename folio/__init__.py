"""
Folio - A Flask Portfolio Framework
===================================

A modular Flask portfolio site with:
- Public hero/about pages and a project listing
- Admin authentication
- Project editing with image upload and AI-generated thumbnails

Usage:
    from flask import Flask
    from folio import Folio

    app = Flask(__name__)
    Folio(app)
"""

import os

__version__ = '0.1.0'

# 16 MiB request ceiling so the 10 MiB image limit is the one users hit
MAX_CONTENT_LENGTH = 16 * 1024 * 1024

DEFAULT_FEATURES = {
    'dashboard': True,
    'projects': True,
    'public': True,
    'ops': True,
}


class Folio:
    """Flask extension that configures the app and registers Folio modules"""

    def __init__(self, app=None, config=None):
        self._config = dict(config or {})
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        from .core.config import Config

        self._apply_defaults(app, Config)
        self._setup_database_dir(app)
        self._register_modules(app)
        self._init_databases(app)
        self._register_context_processor(app)

        app.extensions['folio'] = self

    # ----- setup steps -----

    def _apply_defaults(self, app, base_config):
        """Fill any app.config key the host app did not set"""
        db_dir = app.config.get('DB_DIR') or base_config.DB_DIR
        defaults = {
            'DB_DIR': db_dir,
            'PROJECTS_DB': os.path.join(db_dir, 'projects.db'),
            'USER_DB': os.path.join(db_dir, 'users.db'),
            'LOGS_DB': os.path.join(db_dir, 'app_logs.db'),
            'SECRET_KEY': base_config.SECRET_KEY,
            'GOOGLE_API_KEY': base_config.GOOGLE_API_KEY,
            'IMAGE_MODEL': base_config.IMAGE_MODEL,
            'IMAGE_TIMEOUT': base_config.IMAGE_TIMEOUT,
            'SITE_NAME': self._config.get('site_name', base_config.SITE_NAME),
            'SITE_TAGLINE': self._config.get('site_tagline', base_config.SITE_TAGLINE),
            'ABOUT_TEXT': self._config.get('about_text', base_config.ABOUT_TEXT),
            'SKILLS': self._config.get('skills', base_config.SKILLS),
            'MAX_CONTENT_LENGTH': MAX_CONTENT_LENGTH,
        }
        for key, value in defaults.items():
            if not app.config.get(key):
                app.config[key] = value

        if not app.config.get('SECRET_KEY'):
            print("[FOLIO] WARNING: FLASK_SECRET_KEY is not set; admin sessions will not work")

    def _setup_database_dir(self, app):
        os.makedirs(app.config['DB_DIR'], exist_ok=True)

    def _features(self):
        features = dict(DEFAULT_FEATURES)
        features.update(self._config.get('features', {}))
        return features

    def _register_modules(self, app):
        features = self._features()

        if features.get('dashboard'):
            from .modules.dashboard import dashboard_bp
            app.register_blueprint(dashboard_bp)
            self._registered.append('dashboard')

        if features.get('projects'):
            from .modules.projects import projects_bp
            app.register_blueprint(projects_bp)
            self._registered.append('projects')

        if features.get('public'):
            from .modules.public import public_bp
            app.register_blueprint(public_bp)
            self._registered.append('public')

        if features.get('ops'):
            from .modules.ops import ops_health_bp
            app.register_blueprint(ops_health_bp)
            self._registered.append('ops')

    def _init_databases(self, app):
        from .modules.dashboard.routes import init_admin_table
        from .modules.projects.database import ProjectStore

        with app.app_context():
            ProjectStore(app.config['PROJECTS_DB']).init_db()
            init_admin_table(app.config['USER_DB'])

    def _register_context_processor(self, app):
        folio_config = {
            'features': self._features(),
            'site_name': app.config['SITE_NAME'],
        }

        @app.context_processor
        def inject_folio_config():
            return {
                'folio_config': folio_config,
                'site_name': app.config['SITE_NAME'],
            }

    # ----- introspection -----

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['Folio']
