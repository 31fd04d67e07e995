"""Services Layer: one service per resource, orchestrating gateway calls.

Invariants:
    - Services raise typed errors from core/errors.py, never HTTPException
    - Services depend on the ProductRepository protocol, not on Motor
"""
