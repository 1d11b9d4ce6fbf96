"""
Vocabulary Wallpaper Service
============================

Generates a daily "vocabulary wallpaper" PNG and serves it as an always-fresh
static endpoint for phone automations.

This package provides:
- Word sampling from a curated vocabulary pool
- Dictionary lookups against the Free Dictionary API
- HTML layout generation with Jinja2
- Browser rendering of the layout with Playwright
- A FastAPI service with a daily scheduled regeneration
"""

__version__ = "1.0.0"
__author__ = "Vocabulary Wallpaper Team"
