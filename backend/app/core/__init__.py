"""Core Layer — domain types, errors, protocols, and pure engagement rules.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - engagement_rules functions are pure and deterministic
"""
