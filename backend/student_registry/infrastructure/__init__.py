"""Infrastructure Layer — database sessions and logging setup.

Invariants:
    - Infrastructure maps driver exceptions to core/errors.py types
    - No domain decisions are made here
"""
