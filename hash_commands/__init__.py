"""Hash Commands — deep-link command pipeline driven by the URL fragment.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
