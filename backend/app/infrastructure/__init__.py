"""Infrastructure Layer — database, identity, and storage adapters.

Invariants:
    - Adapters implement the Protocols in core/repository_protocols.py
    - All storage failures mapped to StorageUnavailableError
"""
