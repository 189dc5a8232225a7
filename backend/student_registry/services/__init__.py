"""Services Layer — repository implementation and student use-case orchestration.

Invariants:
    - Services own all IO; they call core/ pure functions in between
    - Routes talk to StudentService only, never to the ORM directly
"""
