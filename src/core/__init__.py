"""
Cross-cutting helpers: structlog setup, request tracing, atomic JSON writes.
"""

from core.logging import bound_context, configure_logging, get_logger
from core.utils import atomic_write_json, utc_now_iso

__all__ = [
    "atomic_write_json",
    "bound_context",
    "configure_logging",
    "get_logger",
    "utc_now_iso",
]
