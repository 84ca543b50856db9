"""
Projects Database
=================

SQLite-backed record accessor for portfolio projects.

- `get(id)` returns the record or None, raising LoadFailure on storage errors
- `update(id, fields)` returns {'success': bool, 'error'?: str} and never raises
"""

import logging
import sqlite3
import uuid

from folio.core import Database, get_config_value
from .errors import LoadFailure, ValidationFailure
from .schema import validate_project

logger = logging.getLogger(__name__)

UPDATE_NOT_FOUND_MESSAGE = 'Could not find project to update.'

_SELECT_COLS = 'id, title, summary, url, image_url, featured, created_at, updated_at'


def get_db_config():
    """Get projects database path"""
    return get_config_value('PROJECTS_DB', 'projects.db')


def _row_to_dict(row):
    """Convert a DB row to a project dict"""
    return {
        'id': row[0],
        'title': row[1],
        'summary': row[2],
        'url': row[3],
        'image_url': row[4],
        'featured': bool(row[5]),
        'created_at': row[6],
        'updated_at': row[7],
    }


def _has_key(fields, *names):
    return any(name in fields for name in names)


class ProjectStore:
    """Read and persist Project records"""

    def __init__(self, db_path=None):
        self.db_path = db_path or get_db_config()

    def init_db(self):
        """Initialize projects table with migrations"""
        Database.ensure_parent_dir(self.db_path)

        with Database.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    summary TEXT NOT NULL,
                    url TEXT NOT NULL,
                    image_url TEXT,
                    featured INTEGER DEFAULT 0,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            # Older databases predate thumbnails and the homepage flag
            added = Database.add_missing_columns(cursor, 'projects', [
                ('image_url', 'TEXT'),
                ('featured', 'INTEGER DEFAULT 0'),
                ('updated_at', 'TIMESTAMP'),
            ])
            for col_name in added:
                logger.info("Added %s column to projects table", col_name)

            cursor.execute('CREATE INDEX IF NOT EXISTS idx_projects_featured ON projects(featured)')
            conn.commit()

    def get(self, project_id):
        """Get single project by ID, None when no record matches"""
        try:
            with Database.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f'SELECT {_SELECT_COLS} FROM projects WHERE id = ?', (project_id,))
                row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error("Error getting project %s: %s", project_id, e)
            raise LoadFailure(f'Could not load project: {e}') from e
        return _row_to_dict(row) if row else None

    def list(self, featured_first=True):
        """All projects, featured ones first, newest first"""
        order = 'featured DESC, created_at DESC, rowid DESC' if featured_first else 'created_at DESC, rowid DESC'
        try:
            with Database.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f'SELECT {_SELECT_COLS} FROM projects ORDER BY {order}')
                return [_row_to_dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            logger.error("Error listing projects: %s", e)
            raise LoadFailure(f'Could not load projects: {e}') from e

    def create(self, fields, project_id=None):
        """Validate and insert a new project, returning the stored record"""
        values = validate_project(fields)
        project_id = project_id or uuid.uuid4().hex

        with Database.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('''
                INSERT INTO projects (id, title, summary, url, image_url, featured)
                VALUES (?, ?, ?, ?, ?, ?)
            ''', (project_id, values['title'], values['summary'], values['url'],
                  values['image_url'], int(values['featured'])))
            conn.commit()

        return self.get(project_id)

    def update(self, project_id, fields):
        """
        Persist new field values for an existing project.

        Optional fields (image_url, featured) left out of `fields` keep their
        stored value. Calling twice with the same fields yields the same record.
        """
        try:
            values = validate_project(fields)
        except ValidationFailure as e:
            return {'success': False, 'error': str(e)}

        assignments = ['title = ?', 'summary = ?', 'url = ?']
        params = [values['title'], values['summary'], values['url']]
        if _has_key(fields, 'image_url', 'imageUrl'):
            assignments.append('image_url = ?')
            params.append(values['image_url'])
        if _has_key(fields, 'featured'):
            assignments.append('featured = ?')
            params.append(int(values['featured']))
        params.append(project_id)

        try:
            with Database.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f'''
                    UPDATE projects
                    SET {', '.join(assignments)}, updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                ''', params)
                conn.commit()
                updated = cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error("Error updating project %s: %s", project_id, e)
            return {'success': False, 'error': f'Could not save project: {e}'}

        if not updated:
            return {'success': False, 'error': UPDATE_NOT_FOUND_MESSAGE}
        return {'success': True}

    def delete(self, project_id):
        """Delete project from database"""
        with Database.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM projects WHERE id = ?', (project_id,))
            conn.commit()
            return cursor.rowcount > 0
