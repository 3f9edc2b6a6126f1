"""Services Layer — engagement toggle, queries, and transition observers.

Invariants:
    - Services depend on core Protocols, never on concrete adapters
      (observers are the exception: they are shell code by nature)
"""
