"""
Storage
=======

Persistence of the single wallpaper artifact.
"""
