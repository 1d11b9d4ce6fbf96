"""
Data Models
===========

Pydantic models shared by the generation pipeline and the API.
"""
