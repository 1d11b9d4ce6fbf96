"""
Generation
==========

Generation cycle orchestration, trigger guards, and the daily scheduler.
"""
