"""
Utilities package for the sales dashboard backend.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of domain-specific logic.
"""

from salesdash.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
