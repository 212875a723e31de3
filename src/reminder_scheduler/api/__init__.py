"""
Operational HTTP surface: health, status and manual trigger.
"""

__all__ = [
    "router",
    "schemas",
]
