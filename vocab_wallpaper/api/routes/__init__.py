"""
API Routes
==========

Route modules for the wallpaper and health endpoints.
"""
