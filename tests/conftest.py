"""
Shared fixtures: a fully initialised Folio app on throwaway databases.
"""

import io
import os
import shutil
import struct
import tempfile
import zlib

import pytest
from flask import Flask
from PIL import Image

from folio import Folio
from folio.modules.projects.database import ProjectStore


def make_image_bytes(size=(64, 48), color=(255, 0, 0, 128), mode='RGBA', fmt='PNG'):
    """Encode a solid-colour test image"""
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def truncated_png_bytes():
    """PNG whose IHDR chunk is shorter than the 13 bytes the format requires"""
    ihdr = struct.pack('>II', 1, 1)
    return (
        b'\x89PNG\r\n\x1a\n'
        + struct.pack('>I', len(ihdr)) + b'IHDR' + ihdr
        + struct.pack('>I', zlib.crc32(b'IHDR' + ihdr))
    )


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="folio-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir):
    """Fully initialised Flask app with all Folio modules registered."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir
    app.config["PROJECTS_DB"] = os.path.join(tmp_db_dir, "projects.db")
    app.config["USER_DB"] = os.path.join(tmp_db_dir, "users.db")
    app.config["LOGS_DB"] = os.path.join(tmp_db_dir, "app_logs.db")
    Folio(app, {'site_name': 'Test Folio'})
    return app


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with the admin session flag set"""
    with client.session_transaction() as sess:
        sess['admin_id'] = 1
        sess['admin_email'] = 'admin@example.com'
    return client


@pytest.fixture
def store(app):
    return ProjectStore(app.config["PROJECTS_DB"])


@pytest.fixture
def seeded_store(store):
    """Store holding the p1 project used throughout the edit scenarios"""
    store.create({
        'title': 'Old',
        'summary': 'Old summary text',
        'url': 'https://x.com',
        'featured': False,
    }, project_id='p1')
    return store
