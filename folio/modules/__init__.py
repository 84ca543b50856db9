"""
Folio Modules
=============

Flask blueprint modules for the portfolio site and its admin area.
"""

__all__ = ['dashboard', 'projects', 'public', 'ops']
