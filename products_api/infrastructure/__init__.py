"""Infrastructure Layer: document store gateway and cross-cutting concerns.

Invariants:
    - Driver exceptions never leave this layer unmapped (see core/errors.py)
"""
