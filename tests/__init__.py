"""
Test Suite
==========

Unit and integration tests for the vocabulary wallpaper service.
"""
