"""
API Layer
=========

FastAPI application serving the daily wallpaper.
"""
