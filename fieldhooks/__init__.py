"""fieldhooks — lifecycle injection of bookkeeping fields on persisted records.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports from submodules only, no star exports
      (entry point is fieldhooks.core.dispatcher.dispatch)
"""
