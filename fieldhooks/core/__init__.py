"""Core Layer — field injection logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from infrastructure/
    - Only the record passed to dispatch() is mutated; all other state is read-only
      or context-local

Design Decisions:
    - Engine separated from persistence bindings: any driver can call dispatch()
"""
