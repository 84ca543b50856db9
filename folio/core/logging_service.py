"""
Application log for Folio sites.

Entries are written to the `app_logs` table in LOGS_DB so admins can see
what happened to a project (uploads, generations, saves, logins) after the
fact. Every entry is also passed to the standard `folio` logger; when the
database cannot be written the entry is printed instead.
"""

import json
import logging
import traceback
from datetime import datetime

from flask import has_request_context, request, session

from .config import get_config_value
from .database import Database

_stdlib_logger = logging.getLogger('folio')

LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS app_logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        level TEXT NOT NULL,
        source TEXT NOT NULL,
        message TEXT NOT NULL,
        details TEXT,
        ip_address TEXT,
        user_agent TEXT,
        request_path TEXT,
        user_id TEXT
    )
"""


class LoggingService:
    """Structured, database-backed log shared by all Folio modules"""

    # Databases whose app_logs table is known to exist
    _ready_paths = set()

    @classmethod
    def _logs_db(cls):
        logs_db = get_config_value('LOGS_DB', 'app_logs.db')
        if logs_db not in cls._ready_paths:
            Database.ensure_parent_dir(logs_db)
            with Database.connect(logs_db) as conn:
                conn.execute(_SCHEMA)
                conn.execute('CREATE INDEX IF NOT EXISTS idx_logs_timestamp ON app_logs(timestamp DESC)')
                conn.execute('CREATE INDEX IF NOT EXISTS idx_logs_source ON app_logs(source)')
                conn.commit()
            cls._ready_paths.add(logs_db)
        return logs_db

    @staticmethod
    def _request_fields():
        """(ip, user agent, path, admin id) of the current request, if any"""
        if not has_request_context():
            return None, None, None, None

        forwarded = request.headers.get('X-Forwarded-For')
        ip_address = forwarded.split(',')[0].strip() if forwarded else request.remote_addr
        return (
            ip_address,
            request.headers.get('User-Agent', ''),
            request.path,
            session.get('admin_id'),
        )

    @classmethod
    def log(cls, level, source, message, details=None, user_id=None):
        """
        Record one entry.

        Args:
            level (str): one of LEVELS
            source (str): component name, e.g. 'projects' or 'admin'
            message (str): one-line summary
            details (dict|str): extra context, stored as JSON
            user_id (str): acting user; defaults to the admin in session
        """
        level = level.upper() if level.upper() in LEVELS else 'INFO'
        _stdlib_logger.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)

        timestamp = datetime.now().isoformat()
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        try:
            ip_address, user_agent, request_path, admin_id = cls._request_fields()
            if user_id is None and admin_id is not None:
                user_id = str(admin_id)

            with Database.connect(cls._logs_db()) as conn:
                conn.execute(
                    """
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (timestamp, level, source, message, details,
                     ip_address, user_agent, request_path, user_id),
                )
                conn.commit()
        except Exception as e:
            # Never let logging break the request
            print(f"[{timestamp}] [{level}] [{source}] {message}")
            if details:
                print(f"Details: {details}")
            print(f"Logging service error: {e}")

    @classmethod
    def info(cls, source, message, details=None, user_id=None):
        cls.log('INFO', source, message, details, user_id)

    @classmethod
    def warning(cls, source, message, details=None, user_id=None):
        cls.log('WARNING', source, message, details, user_id)

    @classmethod
    def error(cls, source, message, details=None, user_id=None):
        cls.log('ERROR', source, message, details, user_id)

    @classmethod
    def log_user_action(cls, source, action, user_id=None, details=None):
        """Admin actions: login, project created/updated/deleted"""
        cls.info(source, f"User action: {action}", details, user_id)

    @classmethod
    def log_error_with_traceback(cls, source, error, details=None):
        """Log a caught exception with the traceback being handled"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc(),
        }
        if details:
            error_details['context'] = details
        cls.error(source, f"{type(error).__name__}: {error}", error_details)

    @classmethod
    def get_recent_logs(cls, limit=50, source=None, level=None):
        """Newest entries first, optionally filtered by source and level"""
        query = 'SELECT timestamp, level, source, message, details, user_id FROM app_logs'
        clauses, params = [], []
        if source:
            clauses.append('source = ?')
            params.append(source)
        if level:
            clauses.append('level = ?')
            params.append(level.upper())
        if clauses:
            query += ' WHERE ' + ' AND '.join(clauses)
        query += ' ORDER BY id DESC LIMIT ?'
        params.append(limit)

        with Database.connect(cls._logs_db()) as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            {'timestamp': r[0], 'level': r[1], 'source': r[2],
             'message': r[3], 'details': r[4], 'user_id': r[5]}
            for r in rows
        ]


# Convenience instance for easy importing
logger = LoggingService()
