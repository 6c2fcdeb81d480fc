"""Infrastructure Layer — logging sink for rendered error chains.

Invariants:
    - Infrastructure consumes core renderings; core never imports from here
"""
