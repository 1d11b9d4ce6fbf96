"""
Core Business Logic
==================

Word selection, dictionary lookups, rendering, storage, and generation scheduling.
"""
