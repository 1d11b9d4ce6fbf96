"""
Rendering Engine
===============

HTML layout generation and PNG screenshot capture.

Components:
- html_generator: Jinja2 wallpaper layout
- png_generator: Playwright-based element capture
"""
