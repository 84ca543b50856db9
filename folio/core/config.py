import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """
    Base configuration for the Folio framework.
    Sites override any of these via environment variables or app.config.
    """
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    PROJECTS_DB = os.getenv('PROJECTS_DB', os.path.join(DB_DIR, 'projects.db'))
    USER_DB = os.getenv('USER_DB', os.path.join(DB_DIR, 'users.db'))
    LOGS_DB = os.getenv('LOGS_DB', os.path.join(DB_DIR, 'app_logs.db'))

    # AI image generation (Google Gemini)
    GOOGLE_API_KEY = os.getenv('GOOGLE_API_KEY') or os.getenv('GEMINI_API_KEY')
    IMAGE_MODEL = os.getenv('IMAGE_MODEL', 'gemini-2.0-flash-preview-image-generation')
    IMAGE_TIMEOUT = int(os.getenv('IMAGE_TIMEOUT', '60'))

    # Public site content
    SITE_NAME = os.getenv('SITE_NAME', 'Rahul Halder')
    SITE_TAGLINE = os.getenv(
        'SITE_TAGLINE',
        'Hacker, Full-Stack Developer & AI Enthusiast. '
        'Crafting secure, scalable, and intelligent web solutions.'
    )
    ABOUT_TEXT = os.getenv(
        'ABOUT_TEXT',
        "I'm a full-stack developer with a hacker mindset, passionate about building "
        "beautiful, functional, and secure web applications. I thrive on solving complex "
        "problems, exploring system intricacies, and continuously learning new technologies."
    )
    SKILLS = [s.strip() for s in os.getenv(
        'SKILLS', 'React,Next.js,Node.js,TypeScript,Cybersecurity,AI/ML'
    ).split(',') if s.strip()]

    # Comma separated origins allowed to read the public projects API
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Port for local server (optional, sites can set this)
    port = int(os.getenv('PORT', '5000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then host Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    try:
        from config import Config as HostConfig
        val = getattr(HostConfig, key, None)
        if val:
            return val
    except ImportError:
        pass
    val = os.getenv(key)
    if val:
        return val
    return getattr(Config, key, None) or default
