import os
from dotenv import load_dotenv

load_dotenv()

IS_PRODUCTION = (
    os.getenv('ENVIRONMENT') == 'production' or
    os.getenv('FLASK_ENV') == 'production'
)

DB_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'databases')


class Config:
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

    # Database paths
    DB_DIR = DB_DIR
    PROJECTS_DB = os.path.join(DB_DIR, 'projects.db')
    USER_DB = os.path.join(DB_DIR, 'users.db')
    LOGS_DB = os.path.join(DB_DIR, 'app_logs.db')

    # Image generation
    GOOGLE_API_KEY = os.getenv('GOOGLE_API_KEY') or os.getenv('GEMINI_API_KEY', '')

    # Public pages
    SITE_NAME = os.getenv('SITE_NAME', 'My Folio')
