"""
Reconciliation scheduler: cadence and run admission.
"""

__all__ = [
    "cadence",
    "service",
]
