"""Infrastructure Layer — logging setup and persistence-layer bindings.

Invariants:
    - Infrastructure calls into core/ only through dispatch() and the public helpers
    - Bindings never decide which fields to write; they only map driver events to phases
"""
