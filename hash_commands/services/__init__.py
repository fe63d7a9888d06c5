"""Services Layer — command dispatch and the runner registries it drives.

Invariants:
    - Dispatch table is an explicit mapping (no getattr lookup, no auto-discovery)
"""
