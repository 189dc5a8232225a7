"""Student Registry Package — enrollment numbers, CSV import and export.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
