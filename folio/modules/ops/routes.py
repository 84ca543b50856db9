"""
Ops Routes
==========

Health check covering disk space and the project database.
"""

import shutil
import time

from flask import jsonify

from folio.core import Database
from folio.modules.projects.database import get_db_config
from . import ops_health_bp

_STARTED_AT = time.time()

DISK_WARNING_PERCENT = 85
DISK_CRITICAL_PERCENT = 95


def _check_disk():
    """Disk usage for the root partition"""
    try:
        usage = shutil.disk_usage('/')
        percent = round((usage.used / usage.total) * 100, 1)
    except OSError as e:
        return {'status': 'warning', 'error': str(e)}

    if percent >= DISK_CRITICAL_PERCENT:
        status = 'critical'
    elif percent >= DISK_WARNING_PERCENT:
        status = 'warning'
    else:
        status = 'ok'
    return {'status': status, 'percent': percent, 'free_gb': round(usage.free / (1024 ** 3), 1)}


def _check_database():
    """Can we open the projects database and count rows?"""
    try:
        with Database.connect(get_db_config()) as conn:
            conn.execute('SELECT COUNT(*) FROM projects').fetchone()
        return {'status': 'ok'}
    except Exception as e:
        return {'status': 'critical', 'error': str(e)}


@ops_health_bp.route('', methods=['GET'])
@ops_health_bp.route('/', methods=['GET'])
def health():
    """Overall status is the worst of the individual checks"""
    checks = {
        'disk': _check_disk(),
        'database': _check_database(),
        'uptime': {'status': 'ok', 'seconds': int(time.time() - _STARTED_AT)},
    }
    statuses = [c['status'] for c in checks.values()]
    if 'critical' in statuses:
        overall = 'critical'
    elif 'warning' in statuses:
        overall = 'warning'
    else:
        overall = 'ok'

    return jsonify({'status': overall, 'checks': checks}), 503 if overall == 'critical' else 200
