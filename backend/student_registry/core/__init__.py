"""Core Layer — pure domain logic, no DB, no async, no HTTP.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - Functions are deterministic given their inputs (id factories and clocks are injectable)

Design Decisions:
    - Functional core separated from imperative shell
"""
