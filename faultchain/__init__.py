"""faultchain — error chains with call-site capture and registered diagnostic codes.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
      (callers import from faultchain.core.chain / codes / format_chain)
"""
