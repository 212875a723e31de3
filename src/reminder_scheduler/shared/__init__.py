"""
Shared utilities and infrastructure components.

Keep this package free of imports from the domain packages.
"""

__all__ = [
    "exceptions",
    "logging",
]
