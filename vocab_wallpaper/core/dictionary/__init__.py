"""
Dictionary Lookups
==================

Free Dictionary API client resolving words into WordEntry models.
"""
