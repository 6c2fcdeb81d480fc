"""Core Layer — error chain model, code registry, stack capture and rendering.

Invariants:
    - core/ may import schemas/; it never imports infrastructure/ or config
    - No IO; the code registry lock is the only shared mutable state

Design Decisions:
    - Functional core separated from the logging/config shell
"""
