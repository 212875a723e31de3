"""
Per-record eligibility policy. Pure: no I/O, no clock access.
"""

__all__ = [
    "models",
    "matching",
    "eligibility",
]
