"""
models/ - Domain Models
=======================
Plain dataclasses persisted by the repositories. Models hold data only and
know nothing about SQL.
"""
