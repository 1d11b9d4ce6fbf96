"""
Test Utilities
==============

Fakes and assertion helpers shared across the test suite.
"""
