"""Core Layer — pure parsing, value types and errors. No IO, no async.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - parse_hash is a pure function of its input string and method table
"""
