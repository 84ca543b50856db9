"""
Public Routes
=============

Home page (hero + about), about page and the published project list.
"""

import logging

from flask import render_template, jsonify
from flask_cors import cross_origin

from folio.core import Config, get_config_value
from folio.modules.projects.database import ProjectStore
from folio.modules.projects.errors import LoadFailure
from . import public_bp

logger = logging.getLogger(__name__)

# Origins allowed to embed the project feed, e.g. "https://a.com,https://b.com"
ALLOWED_ORIGINS = [o.strip() for o in Config.CORS_ORIGINS.split(',') if o.strip()] or '*'

HOME_FEATURED_LIMIT = 3


def _site_context():
    """Hero and about content, overridable per site"""
    skills = get_config_value('SKILLS', Config.SKILLS)
    if isinstance(skills, str):
        skills = [s.strip() for s in skills.split(',') if s.strip()]
    return {
        'site_name': get_config_value('SITE_NAME', Config.SITE_NAME),
        'site_tagline': get_config_value('SITE_TAGLINE', Config.SITE_TAGLINE),
        'about_text': get_config_value('ABOUT_TEXT', Config.ABOUT_TEXT),
        'skills': skills,
    }


def _load_projects():
    """Featured projects first; an unreadable store shows an empty list"""
    try:
        return ProjectStore().list(featured_first=True)
    except LoadFailure as e:
        logger.error("Error loading projects for public page: %s", e)
        return []


def _public_fields(project):
    return {
        'id': project['id'],
        'title': project['title'],
        'summary': project['summary'],
        'url': project['url'],
        'image_url': project['image_url'],
        'featured': project['featured'],
    }


@public_bp.route('/')
def home():
    """Homepage: hero, about and featured work"""
    projects = _load_projects()
    featured = [p for p in projects if p['featured']][:HOME_FEATURED_LIMIT]
    if not featured:
        featured = projects[:HOME_FEATURED_LIMIT]
    return render_template('public/home.html', projects=featured, **_site_context())


@public_bp.route('/about')
def about():
    """About page"""
    return render_template('public/about.html', **_site_context())


@public_bp.route('/projects/')
def projects_list():
    """Public projects listing"""
    return render_template('public/projects.html', projects=_load_projects(), **_site_context())


@public_bp.route('/projects/api/projects', methods=['GET'])
@cross_origin(origins=ALLOWED_ORIGINS, supports_credentials=False)
def projects_feed():
    """Published projects API - public endpoint"""
    return jsonify([_public_fields(p) for p in _load_projects()])
