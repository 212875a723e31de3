"""
Contact record model and record store adapters.

Do not import adapters here; they pull in httpx.
"""

__all__ = [
    "models",
    "parsing",
    "interface",
    "mapping",
    "rest_adapter",
    "memory_adapter",
    "factory",
]
