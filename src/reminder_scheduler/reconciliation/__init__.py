"""
Reconciliation run: one pass over the record snapshot.
"""

__all__ = [
    "models",
    "snapshot",
    "service",
]
