"""
Word Selection
==============

Curated vocabulary pool and random sampling.
"""
