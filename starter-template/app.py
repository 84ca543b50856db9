"""
Folio Starter Template
======================

A ready-to-run portfolio site with every Folio module enabled.

Run with:
    python app.py

Visit:
    http://localhost:5000        - Homepage
    http://localhost:5000/admin  - Admin panel
"""

from flask import Flask

from config import Config, IS_PRODUCTION
from folio import Folio

# Create Flask app
app = Flask(__name__)
app.config.from_object(Config)

# Initialize Folio - this registers all modules automatically
folio = Folio(app)


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Folio Starter Template")
    print("=" * 60)
    print("Homepage:        http://localhost:5000")
    print("Admin Panel:     http://localhost:5000/admin")
    print("Create Admin:    http://localhost:5000/admin/create-admin")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=5000, debug=not IS_PRODUCTION)
